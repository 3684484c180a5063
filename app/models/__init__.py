# Package init for app.models
from .addons import Addon as Addon
from .event import Event as Event
from .gala import GalaTable as GalaTable
from .gala import SeatingLayout as SeatingLayout
from .logging import AppErrorLog as AppErrorLog
from .registration import Registration as Registration
from .user import AdminUser as AdminUser
from .user import Base as Base  # explicit re-export
from .workshop import Milonga as Milonga
from .workshop import Workshop as Workshop
