import enum
from pet_market import db
from pet_market.utils.util import utcnow


class RescueStatus(enum.Enum):
    PLANNING = 'planning'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class AnimalCondition(enum.Enum):
    CRITICAL = 'critical'
    POOR = 'poor'
    FAIR = 'fair'
    GOOD = 'good'
    UNKNOWN = 'unknown'


class Rescue(db.Model):
    __tablename__ = 'rescue'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    ngo_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    status = db.Column(db.Enum(RescueStatus), nullable=False, default=RescueStatus.PLANNING)
    location_address = db.Column(db.String(255))
    location_city = db.Column(db.String(100), nullable=False)
    location_state = db.Column(db.String(100), nullable=False)
    location_country = db.Column(db.String(100), nullable=False)
    location_coordinates = db.Column(db.JSON)
    description = db.Column(db.Text, nullable=False)
    rescue_date_planned = db.Column(db.DateTime, nullable=False)
    rescue_date_actual = db.Column(db.DateTime)
    animals = db.Column(db.JSON, nullable=False, default=list)
    resources = db.Column(db.JSON, nullable=False, default=dict)
    funding_required = db.Column(db.Float, nullable=False, default=0)
    # Running total, incremented with each donation in the same commit
    funding_raised = db.Column(db.Float, nullable=False, default=0)
    outcomes = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    ngo = db.relationship('User', backref=db.backref('rescues', lazy=True))
    team = db.relationship('RescueTeamMember', backref='rescue', lazy=True,
                           cascade='all, delete-orphan', order_by='RescueTeamMember.id')
    donations = db.relationship('RescueDonation', backref='rescue', lazy=True,
                                cascade='all, delete-orphan', order_by='RescueDonation.id')
    updates = db.relationship('RescueUpdate', backref='rescue', lazy=True,
                              cascade='all, delete-orphan', order_by='RescueUpdate.id')

    def __repr__(self):
        return f'<Rescue {self.title} ({self.status})>'


class RescueTeamMember(db.Model):
    __tablename__ = 'rescue_team_member'
    id = db.Column(db.Integer, primary_key=True)
    rescue_id = db.Column(db.Integer, db.ForeignKey('rescue.id'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    role = db.Column(db.String(100), nullable=False)
    member = db.relationship('User')


class RescueDonation(db.Model):
    __tablename__ = 'rescue_donation'
    id = db.Column(db.Integer, primary_key=True)
    rescue_id = db.Column(db.Integer, db.ForeignKey('rescue.id'), nullable=False)
    donor_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    anonymous_donor = db.Column(db.JSON)
    amount = db.Column(db.Float, nullable=False)
    message = db.Column(db.Text)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    donor = db.relationship('User')


class RescueUpdate(db.Model):
    __tablename__ = 'rescue_update'
    id = db.Column(db.Integer, primary_key=True)
    rescue_id = db.Column(db.Integer, db.ForeignKey('rescue.id'), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('user.id'))
    content = db.Column(db.Text, nullable=False)
    images = db.Column(db.JSON, nullable=False, default=list)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    author = db.relationship('User')
