from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class Cause(db.Model):
    """
    A named category of stoppage.
    Causes are never deleted, only deactivated through is_active.
    """
    __tablename__ = "causes"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), unique=True, nullable=False)
    name = db.Column(db.String(128), nullable=False)
    category = db.Column(db.String(64))
    description = db.Column(db.String(255))

    # Downtime under this cause counts against TRS
    affects_efficiency = db.Column(db.Boolean, nullable=False, default=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "affects_efficiency": self.affects_efficiency,
            "is_active": self.is_active
        }
