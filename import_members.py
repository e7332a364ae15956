"""
Pre-register union members so they can self-register on the portal.
CSV columns: email, birthdate (YYYY-MM-DD), optional status (Activo/Inactivo).
Run: python import_members.py members.csv
"""
import csv
import sys

from models.user import STATUS_ACTIVE, STATUS_INACTIVE
from utils.validators import normalize_email, parse_iso_date, validate_email


def read_members(lines):
    """Yield (email, birthdate, status) rows; invalid rows are reported and skipped."""
    for line_no, row in enumerate(csv.DictReader(lines), start=2):
        email = normalize_email(row.get('email'))
        birthdate = parse_iso_date((row.get('birthdate') or '').strip())
        status = (row.get('status') or STATUS_ACTIVE).strip() or STATUS_ACTIVE
        if not validate_email(email) or birthdate is None or status not in (STATUS_ACTIVE, STATUS_INACTIVE):
            print(f"  line {line_no}: skipped (invalid email, birthdate or status)")
            continue
        yield email, birthdate, status


def import_members(path):
    from app import create_app
    from models import db
    from models.user import User, UserProfile

    app = create_app()
    with app.app_context(), open(path, newline='', encoding='utf-8') as fh:
        print(f"Importing members from {path}...")
        created = 0
        updated = 0
        for email, birthdate, status in read_members(fh):
            user = User.query.filter_by(email=email).first()
            if not user:
                user = User(email=email, status=status, registration_complete=False)
                user.profile = UserProfile(birthdate=birthdate)
                db.session.add(user)
                created += 1
            else:
                user.status = status
                if user.profile is None:
                    user.profile = UserProfile(birthdate=birthdate)
                else:
                    user.profile.birthdate = birthdate
                updated += 1

        try:
            db.session.commit()
            print(f"Done. Created: {created}, Updated: {updated}")
        except Exception as e:
            db.session.rollback()
            print(f"Error: {e}")


if __name__ == '__main__':
    if len(sys.argv) != 2:
        print("Usage: python import_members.py members.csv")
        sys.exit(1)
    import_members(sys.argv[1])
