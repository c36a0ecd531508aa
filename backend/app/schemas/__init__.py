"""Pydantic schemas for the EcoPermit Administration API."""

from app.schemas.profile import *
from app.schemas.entity import *
from app.schemas.permit import *
from app.schemas.assessment import *
from app.schemas.task import *
from app.schemas.audit import *
from app.schemas.notification import *
from app.schemas.fee import *
from app.schemas.dashboard import *
