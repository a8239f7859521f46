from surveyadmin.models.message import Message, MessageTemplate, MessageType
from surveyadmin.models.respondent import Respondent
from surveyadmin.models.subject import ExcludedXid, Subject
from surveyadmin.models.survey import Department, Survey

__all__ = [
    "Department",
    "ExcludedXid",
    "Message",
    "MessageTemplate",
    "MessageType",
    "Respondent",
    "Subject",
    "Survey",
]
