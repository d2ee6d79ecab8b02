"""Models package."""
from catalog.models.base import Base
from catalog.models.user import User
from catalog.models.application import Application, ApplicationStakeholder, ApplicationRelationship
from catalog.models.stakeholder import Stakeholder, StakeholderRoleAssignment

__all__ = [
    "Base",
    "User",
    "Application",
    "ApplicationStakeholder",
    "ApplicationRelationship",
    "Stakeholder",
    "StakeholderRoleAssignment",
]
