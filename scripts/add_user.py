#!/usr/bin/env python3
"""
Cadastrar um usuario do painel (senha gravada com argon2).

Uso:
  python scripts/add_user.py --username admin --password segredo --name "Administrador" --email admin@escola.br [--level admin] [--inactive]
"""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from educa_especial.services.crud_service import CrudError, RecordValidationError, UserService


def main() -> None:
    ap = argparse.ArgumentParser(description="Cadastrar usuario do painel administrativo")
    ap.add_argument("--username", required=True, help="Login do usuario")
    ap.add_argument("--password", required=True, help="Senha em texto (sera gravada com hash)")
    ap.add_argument("--name", help="Nome completo (default: username)")
    ap.add_argument("--email", default="", help="E-mail de contato")
    ap.add_argument("--level", default="admin", help="Nivel de acesso (default: admin)")
    ap.add_argument("--inactive", action="store_true", help="Cria o usuario desativado")
    args = ap.parse_args()

    service = UserService()
    try:
        user = service.create(
            {
                "name": (args.name or args.username).strip(),
                "email": args.email.strip() or f"{args.username}@localhost",
                "username": args.username.strip(),
                "password": args.password,
                "level": args.level.strip(),
                "status": not args.inactive,
            }
        )
    except RecordValidationError as exc:
        details = "; ".join(f"{e['field']}: {e['message']}" for e in exc.errors)
        raise SystemExit(f"{exc.message} {details}")
    except CrudError as exc:
        raise SystemExit(exc.message)
    print("OK: usuario cadastrado")
    print(f"  ID: {user['id']}")
    print(f"  Usuario: {user['username']}")
    print(f"  Nivel: {user['level']}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - uso CLI
        sys.stderr.write(f"Erro: {exc}\n")
        raise SystemExit(1)
