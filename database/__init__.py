from .db import DBBase, DBBaseClass, SessionLocal, get_db, init_models, time_now
