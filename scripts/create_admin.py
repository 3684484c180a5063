import argparse

from sqlalchemy.orm import Session

from app.models.user import AdminUser
from app.services.auth import create_admin, hash_password
from db import SessionLocal

ROLES = ("admin", "manager", "staff")


def upsert_admin(
    username: str, email: str, password: str | None, role: str, deactivate: bool
) -> tuple[bool, int]:
    s: Session = SessionLocal()
    try:
        admin = s.query(AdminUser).filter(AdminUser.Username == username).first()
        created = False
        if not admin:
            if not password or not email:
                raise ValueError("Email and password required to create a new admin")
            admin = create_admin(s, username, email, password, role=role)
            if not admin:
                raise ValueError("Username or email already exists")
            created = True
        else:
            if email:
                setattr(admin, "Email", email)
            if password:
                setattr(admin, "HashedPassword", hash_password(password))
            setattr(admin, "Role", role)
        setattr(admin, "IsActive", not deactivate)
        s.commit()
        s.refresh(admin)
        return created, int(getattr(admin, "AdminID"))
    finally:
        s.close()


def main():
    parser = argparse.ArgumentParser(description="Create or update an admin user.")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", default="")
    parser.add_argument("--password", default=None)
    parser.add_argument("--role", choices=ROLES, default="admin")
    parser.add_argument("--deactivate", action="store_true", help="Disable the account")
    args = parser.parse_args()

    created, admin_id = upsert_admin(
        username=args.username.strip(),
        email=args.email.strip(),
        password=args.password,
        role=args.role,
        deactivate=bool(args.deactivate),
    )
    status = "created" if created else "updated"
    print(f"Admin {status}: id={admin_id} username={args.username} role={args.role}")


if __name__ == "__main__":
    main()
