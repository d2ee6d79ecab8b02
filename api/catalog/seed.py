"""Seed an admin user and a sample application catalog."""
import os
import sys
from typing import Dict, List
from sqlalchemy.orm import Session
from catalog.core.config import settings
from catalog.core.constants import STAKEHOLDER_ROLES, StakeholderRoleKey
from catalog.core.database import SessionLocal
from catalog.core.security import get_password_hash, verify_password
from catalog.models import Application, Stakeholder, StakeholderRoleAssignment, User
from catalog.schemas.application import ApplicationCreate
from catalog.services.application_gateway import ApplicationGateway

SAMPLE_PEOPLE = [
    ("John Smith", "IT Development", "Enterprise Architect"),
    ("Sarah Johnson", "Human Resources", "HR Product Lead"),
    ("Michael Brown", "IT Development", "Senior Developer"),
    ("Emily Davis", "IT Operations", "DevOps Engineer"),
    ("David Wilson", "Security", "Security Officer"),
    ("Lisa Anderson", "Compliance", "Governance Manager"),
    ("Robert Taylor", "Finance", "Solutions Architect"),
    ("Jennifer Martinez", "Finance", "Product Owner"),
]

# Stakeholder map keys paired with the directory role label for the same slot
ROLE_SLOTS = list(zip([role.value for role in StakeholderRoleKey], STAKEHOLDER_ROLES))

SAMPLE_APPLICATIONS: List[Dict] = [
    {
        "appCode": "HR1",
        "name": "Employee Management System",
        "description": "HRMS covering the employee lifecycle from onboarding to offboarding, "
                       "including payroll, benefits and performance reviews.",
        "functionalDomains": ["Human Resources"],
        "technicalStack": ["React", "Node.js", "PostgreSQL", "Docker", "AWS"],
        "status": "Active",
        "relatedApps": {"functional": ["HR2", "FN1"], "technical": ["IT1", "SC1"]},
    },
    {
        "appCode": "FN1",
        "name": "Financial Planning Tool",
        "description": "Budget planning and financial analysis with forecasting and expense tracking.",
        "functionalDomains": ["Finance", "Analytics"],
        "technicalStack": ["Angular", "Java", "Spring Boot", "MongoDB", "Azure"],
        "status": "Active",
        "relatedApps": {"functional": ["FN2", "AN1"], "technical": ["IT2"]},
    },
    {
        "appCode": "MK1",
        "name": "Digital Marketing Hub",
        "description": "Marketing automation for campaigns, lead nurturing and social media.",
        "functionalDomains": ["Marketing", "Analytics"],
        "technicalStack": ["Vue.js", "Python", "Django", "Redis", "GCP"],
        "status": "Active",
        "relatedApps": {"functional": ["SL1", "CS1"], "technical": ["AN1"]},
    },
    {
        "appCode": "SL1",
        "name": "Sales Force Automation",
        "description": "CRM with pipeline management, opportunity tracking and quote generation.",
        "functionalDomains": ["Sales", "Analytics"],
        "technicalStack": ["React", "C#", ".NET", "PostgreSQL", "Kubernetes"],
        "status": "Active",
        "relatedApps": {"functional": ["MK1", "CS1"], "technical": []},
    },
    {
        "appCode": "IT1",
        "name": "IT Service Management",
        "description": "Incident, change and asset management with a service catalog.",
        "functionalDomains": ["IT Operations"],
        "technicalStack": ["Angular", "Node.js", "Express.js", "MongoDB", "Docker"],
        "status": "Active",
        "relatedApps": {"functional": ["IT2"], "technical": ["HR1"]},
    },
    {
        "appCode": "SC1",
        "name": "Supply Chain Management",
        "description": "Procurement, inventory and logistics planning.",
        "functionalDomains": ["Supply Chain"],
        "technicalStack": ["Vue.js", "Java", "Spring Boot", "MongoDB", "Microservices"],
        "status": "Under Development",
        "relatedApps": {"functional": [], "technical": ["IT1"]},
    },
    {
        "appCode": "IT2",
        "name": "Asset Management System",
        "description": "Hardware and software asset tracking with depreciation reporting.",
        "functionalDomains": ["IT Operations", "Finance"],
        "technicalStack": ["Vue.js", "C#", "ASP.NET Core", "PostgreSQL", "Docker"],
        "status": "Inactive",
        "relatedApps": {"functional": ["IT1"], "technical": ["FN1"]},
    },
    {
        "appCode": "CM1",
        "name": "Compliance Management System",
        "description": "Policy management, audit tracking and regulatory reporting.",
        "functionalDomains": ["Compliance"],
        "technicalStack": ["Vue.js", "Node.js", "MongoDB", "Docker", "GCP"],
        "status": "Deprecated",
        "relatedApps": {"functional": [], "technical": []},
    },
]


def is_production_env() -> bool:
    return settings.ENVIRONMENT.lower() == "production"


def get_seed_admin_password() -> str | None:
    password = os.getenv("SEED_ADMIN_PASSWORD")
    if password:
        password = password.strip()

    if is_production_env():
        if password == "admin123":
            print("FATAL: SEED_ADMIN_PASSWORD cannot be the default in production.", file=sys.stderr)
            sys.exit(1)
        return password or None

    return password or "admin123"


def seed_admin(db: Session) -> User:
    admin = db.query(User).filter(User.email == "admin@example.com").first()
    if admin:
        print("✓ Admin user already exists")
        if is_production_env() and verify_password("admin123", admin.password_hash):
            print("WARNING: admin@example.com still uses the default password in production. Rotate immediately.", file=sys.stderr)
        return admin

    admin_password = get_seed_admin_password()
    if admin_password is None:
        print("FATAL: SEED_ADMIN_PASSWORD is required to create the admin user in production.", file=sys.stderr)
        sys.exit(1)
    admin = User(
        email="admin@example.com",
        name="Admin User",
        password_hash=get_password_hash(admin_password),
        role="admin",
    )
    db.add(admin)
    db.commit()
    print("✓ Created admin user (admin@example.com)")
    return admin


def seed_stakeholders(db: Session) -> Dict[str, Stakeholder]:
    """Directory entries for the sample people, keyed by name."""
    people: Dict[str, Stakeholder] = {}
    for name, department, position in SAMPLE_PEOPLE:
        stakeholder = db.query(Stakeholder).filter(Stakeholder.name == name).first()
        if not stakeholder:
            email = name.lower().replace(" ", ".") + "@example.com"
            stakeholder = Stakeholder(name=name, email=email, department=department, position=position)
            db.add(stakeholder)
        people[name] = stakeholder
    db.commit()
    print(f"✓ Seeded {len(people)} stakeholders")
    return people


def seed_applications(db: Session, people: Dict[str, Stakeholder]) -> int:
    """Create any sample application not already present; rotate people through the six roles."""
    gateway = ApplicationGateway(db)
    existing = gateway.existing_app_codes()
    names = [name for name, _, _ in SAMPLE_PEOPLE]
    created = 0

    for index, record in enumerate(SAMPLE_APPLICATIONS):
        if record["appCode"] in existing:
            continue
        assigned = [
            (key, label, names[(index + offset) % len(names)])
            for offset, (key, label) in enumerate(ROLE_SLOTS)
        ]
        stakeholders = {key: name for key, _, name in assigned}
        application = gateway.create_application(
            ApplicationCreate.model_validate({**record, "stakeholders": stakeholders})
        )
        for _, label, name in assigned:
            db.add(StakeholderRoleAssignment(
                stakeholder_id=people[name].stakeholder_id,
                application_id=application.id,
                role=label,
            ))
        db.commit()
        created += 1

    total = db.query(Application).count()
    print(f"✓ Created {created} sample applications ({total} total)")
    return created


def seed_database():
    """Seed essential data."""
    db = SessionLocal()

    try:
        print("Starting database seeding...")
        seed_admin(db)
        if is_production_env() and os.getenv("SEED_DEMO_DATA", "").lower() not in {"1", "true", "yes"}:
            print("Skipping sample catalog in production")
            return
        people = seed_stakeholders(db)
        seed_applications(db, people)
        print("Seeding complete.")
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
