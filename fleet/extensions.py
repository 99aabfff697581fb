from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

from .realtime.extension import Realtime
from .storage.extension import Storage

# Extensions are created once and initialized in create_app().
db = SQLAlchemy()
login_manager = LoginManager()
storage = Storage()
realtime = Realtime()
