from .user import User, RegisterRequest, LoginRequest, ProfileUpdate, ChangePasswordRequest
from .project import Project, ProjectCreate, ProjectUpdate
from .experience import Experience, ExperienceCreate, ExperienceUpdate
from .skill import Skill, SkillCreate, SkillUpdate, resolve_percent
from .about import About, AboutCreate, AboutUpdate, Education
from .newsletter import Newsletter, SubscribeRequest
from .contact import Contact, ContactCreate, ContactStatusUpdate

__all__ = [
	"User",
	"RegisterRequest",
	"LoginRequest",
	"ProfileUpdate",
	"ChangePasswordRequest",
	"Project",
	"ProjectCreate",
	"ProjectUpdate",
	"Experience",
	"ExperienceCreate",
	"ExperienceUpdate",
	"Skill",
	"SkillCreate",
	"SkillUpdate",
	"resolve_percent",
	"About",
	"AboutCreate",
	"AboutUpdate",
	"Education",
	"Newsletter",
	"SubscribeRequest",
	"Contact",
	"ContactCreate",
	"ContactStatusUpdate",
]
