"""Demo data for local development."""
from typing import List, Tuple
from attendance_api import db
from attendance_api.models.user import User, UserRole

DEMO_USERS = [
    ('admin@university.edu', 'System Administrator', UserRole.ADMIN, 'admin123', None),
    ('teacher@university.edu', 'Demo Teacher', UserRole.TEACHER, 'teacher123', None),
    ('student@university.edu', 'Demo Student', UserRole.STUDENT, 'student123', 'CS2024001'),
]

class SeedService:

    @staticmethod
    def seed_users() -> List[Tuple[str, str]]:
        """Create the demo accounts that do not exist yet."""
        created = []
        for email, name, role, password, roll_number in DEMO_USERS:
            if User.query.filter_by(email=email).first():
                continue
            user = User(
                email=email,
                name=name,
                role=role,
                roll_number=roll_number,
                department='Computer Science' if role != UserRole.ADMIN else None
            )
            user.set_password(password)
            db.session.add(user)
            created.append((email, password))

        db.session.commit()
        return created
