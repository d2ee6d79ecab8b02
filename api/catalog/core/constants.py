"""Reference lists offered by the catalog forms and filters."""
import enum
from typing import List


class ApplicationStatus(str, enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DEPRECATED = "Deprecated"
    UNDER_DEVELOPMENT = "Under Development"


class StakeholderRoleKey(str, enum.Enum):
    """The six fixed stakeholder slots on every application."""
    APPLICATION_ARCHITECT = "applicationArchitect"
    PRODUCT_OWNER = "productOwner"
    LEAD_DEVELOPER = "leadDeveloper"
    DEVOPS_ENGINEER = "devOpsEngineer"
    SECURITY_OFFICER = "securityOfficer"
    GOVERNANCE_MANAGER = "governanceManager"


class RelationshipType(str, enum.Enum):
    FUNCTIONAL = "functional"
    TECHNICAL = "technical"


STATUS_OPTIONS: List[str] = [s.value for s in ApplicationStatus]
DEFAULT_STATUS = ApplicationStatus.UNDER_DEVELOPMENT.value

FUNCTIONAL_DOMAINS: List[str] = [
    "Human Resources", "Finance", "Marketing", "Sales", "IT Operations",
    "Customer Service", "Supply Chain", "Analytics", "Security", "Compliance",
]

TECHNICAL_STACKS: List[str] = [
    "React", "Angular", "Vue.js", "Node.js", "Java", "Python", "C#", ".NET",
    "Spring Boot", "Express.js", "PostgreSQL", "MongoDB", "Redis", "Docker",
    "Kubernetes", "AWS", "Azure", "GCP", "Microservices", "REST API", "GraphQL",
]

# Free-text labels used when assigning directory stakeholders to applications
STAKEHOLDER_ROLES: List[str] = [
    "Application Architect",
    "Product Owner",
    "Lead Developer",
    "DevOps Engineer",
    "Security Officer",
    "Governance Manager",
    "Business Analyst",
    "QA Lead",
    "UX Designer",
    "Technical Lead",
]

DEFAULT_DEPARTMENT = "General"

DEPARTMENTS: List[str] = [
    "Human Resources",
    "Finance",
    "Marketing",
    "Sales",
    "IT Operations",
    "IT Development",
    "Customer Service",
    "Supply Chain",
    "Analytics",
    "Security",
    "Compliance",
    "Executive",
    DEFAULT_DEPARTMENT,
]

# Storage keys for persisted UI preferences
PREFERENCES_KEY = "app_directory_preferences"
SEARCH_HISTORY_KEY = "app_directory_search_history"
