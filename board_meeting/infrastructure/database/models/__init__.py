from .agenda_model import AgendaModel
from .user_model import LoginLogModel, UserModel

__all__ = ["AgendaModel", "UserModel", "LoginLogModel"]
