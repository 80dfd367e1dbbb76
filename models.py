from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from database import get_db


class User(UserMixin):
    """Dashboard user. The only role is 'may view analytics'."""

    def __init__(self, id, email, password_hash=None, created_at=None):
        self.id = id
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at

    @property
    def display_name(self):
        return self.email.split('@')[0].replace('.', ' ').replace('_', ' ').title()

    def check_password(self, password):
        if not self.password_hash or not password:
            return False
        return check_password_hash(self.password_hash, password)

    @classmethod
    def _from_row(cls, row):
        if not row:
            return None
        row = dict(row)
        return cls(
            id=row['id'],
            email=row['email'],
            password_hash=row.get('password_hash'),
            created_at=row.get('created_at'),
        )

    @classmethod
    def get(cls, user_id):
        db = get_db()
        row = db.execute("SELECT * FROM users WHERE id = %s", (user_id,)).fetchone()
        return cls._from_row(row)

    @classmethod
    def get_by_email(cls, email):
        if not email:
            return None
        db = get_db()
        row = db.execute(
            "SELECT * FROM users WHERE email = %s", (email.strip().lower(),)
        ).fetchone()
        return cls._from_row(row)

    @classmethod
    def create(cls, email, password):
        """Insert a user and return it. Caller owns nothing else; this commits."""
        db = get_db()
        row = db.execute(
            "INSERT INTO users (email, password_hash) VALUES (%s, %s) RETURNING *",
            (email.strip().lower(), generate_password_hash(password)),
        ).fetchone()
        db.commit()
        return cls._from_row(row)
