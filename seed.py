from __future__ import annotations

import os
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from auth import hash_password
from models import NotesNode, User
from notes import load_tree

DEMO_ACCOUNTS = [
    # (role, plan, env prefix, default email, default password)
    ("admin", "basic", "JURNIQ_ADMIN", "admin@jurniq.local", "Admin123!"),
    ("student", "student", "JURNIQ_STUDENT", "student@jurniq.local", "Student123!"),
    ("teacher", "teacher", "JURNIQ_TEACHER", "teacher@jurniq.local", "Teacher123!"),
    ("parent", "parent", "JURNIQ_PARENT", "parent@jurniq.local", "Parent123!"),
]

SAMPLE_CATALOGUE: dict[str, Any] = {
    "Class 8": {
        "Science": {
            "Crop Production and Management": {
                "Agricultural Practices": ["https://ncert.nic.in/textbook/pdf/hesc101.pdf"],
                "Storage of Harvest": [],
            },
            "Microorganisms": {
                "Friend and Foe": ["https://ncert.nic.in/textbook/pdf/hesc102.pdf"],
            },
        },
        "Mathematics": {
            "Rational Numbers": {
                "Properties of Rational Numbers": ["https://ncert.nic.in/textbook/pdf/hemh101.pdf"],
            },
        },
    },
    "Class 10": {
        "Science": {
            "Light - Reflection and Refraction": {
                "Spherical Mirrors": ["https://ncert.nic.in/textbook/pdf/jesc109.pdf"],
                "Refraction of Light": ["https://ncert.nic.in/textbook/pdf/jesc109.pdf"],
            },
        },
        "Mathematics": {
            "Real Numbers": {
                "Fundamental Theorem of Arithmetic": ["https://ncert.nic.in/textbook/pdf/jemh101.pdf"],
            },
        },
    },
    "Class 11th": {
        "streams": {
            "Science": {
                "Physics": {
                    "Units and Measurement": {
                        "Significant Figures": ["https://ncert.nic.in/textbook/pdf/keph101.pdf"],
                    },
                },
                "Biology": {
                    "The Living World": {
                        "Taxonomic Categories": ["https://ncert.nic.in/textbook/pdf/kebo101.pdf"],
                    },
                },
            },
            "Commerce": {
                "Accountancy": {
                    "Introduction to Accounting": {
                        "Basic Accounting Terms": ["https://ncert.nic.in/textbook/pdf/keac101.pdf"],
                    },
                },
            },
        },
    },
    "Class 12th": {
        "streams": {
            "Science": {
                "Chemistry": {
                    "Solutions": {
                        "Colligative Properties": ["https://ncert.nic.in/textbook/pdf/lech101.pdf"],
                    },
                },
            },
        },
    },
}


def seed_default_users(db: Session) -> None:
    for role, plan, prefix, default_email, default_password in DEMO_ACCOUNTS:
        email = os.getenv(f"{prefix}_EMAIL", default_email).strip().lower()
        password = os.getenv(f"{prefix}_PASSWORD", default_password)
        user = db.scalar(select(User).where(User.email == email))
        if user:
            continue
        db.add(
            User(
                role=role,
                name=f"Demo {role.capitalize()}",
                email=email,
                password_hash=hash_password(password),
                subscription_model=plan,
                is_subscribed=plan != "basic",
                saved_academies=[],
                saved_business_ideas=[],
            )
        )
    db.flush()


def seed_notes_if_empty(db: Session, catalogue: dict[str, Any] | None = None) -> int:
    total = db.scalar(select(func.count()).select_from(NotesNode))
    if total and total > 0:
        return 0
    return load_tree(db, catalogue or SAMPLE_CATALOGUE)


def seed_all(db: Session) -> None:
    seed_default_users(db)
    seed_notes_if_empty(db)
