"""Create a demo user owning a project with one board."""
from taskflow.config import DATABASE_URL
from taskflow.database import create_db_engine, create_tables, session_scope
from taskflow.models import User
from taskflow.services.accounts import hash_password
from taskflow.services.hierarchy import HierarchyManager

engine = create_db_engine(DATABASE_URL)

# Create tables if not exist
create_tables(engine)

with session_scope(engine) as db:
    existing_user = db.query(User).filter(User.email == "test@example.com").first()
    if existing_user:
        print("User already exists")
    else:
        user = User(email="test@example.com", hashed_password=hash_password("password"))
        db.add(user)
        db.commit()

        hierarchy = HierarchyManager(db)
        project = hierarchy.create_project("Demo project", "Created by add_user.py", owner=user)
        hierarchy.create_board("Sprint 1", project.id)
        print("Test user created: test@example.com / password")
