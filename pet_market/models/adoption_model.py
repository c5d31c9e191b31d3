import enum
from pet_market import db
from pet_market.utils.util import utcnow


class AdoptionStatus(enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


# An applicant may hold at most one of these per pet
ACTIVE_ADOPTION_STATUSES = (AdoptionStatus.PENDING, AdoptionStatus.APPROVED)


class LivingArrangement(enum.Enum):
    HOUSE = 'house'
    APARTMENT = 'apartment'
    CONDO = 'condo'
    OTHER = 'other'


class Adoption(db.Model):
    __tablename__ = 'adoption'
    id = db.Column(db.Integer, primary_key=True)
    pet_id = db.Column(db.Integer, db.ForeignKey('pet.id'), nullable=True)
    applicant_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    provider_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    status = db.Column(db.Enum(AdoptionStatus), nullable=False, default=AdoptionStatus.PENDING)
    application_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    completion_date = db.Column(db.DateTime)
    application_details = db.Column(db.JSON, nullable=False)
    pet = db.relationship('Pet', backref=db.backref('adoptions', lazy=True))
    applicant = db.relationship('User', foreign_keys=[applicant_id])
    provider = db.relationship('User', foreign_keys=[provider_id])
    messages = db.relationship('AdoptionMessage', backref='adoption', lazy=True,
                               cascade='all, delete-orphan', order_by='AdoptionMessage.id')
    notes = db.relationship('AdoptionNote', backref='adoption', lazy=True,
                            cascade='all, delete-orphan', order_by='AdoptionNote.id')
    follow_ups = db.relationship('AdoptionFollowUp', backref='adoption', lazy=True,
                                 cascade='all, delete-orphan', order_by='AdoptionFollowUp.id')

    def __repr__(self):
        return f'<Adoption {self.id} pet={self.pet_id} ({self.status})>'


class AdoptionMessage(db.Model):
    __tablename__ = 'adoption_message'
    id = db.Column(db.Integer, primary_key=True)
    adoption_id = db.Column(db.Integer, db.ForeignKey('adoption.id'), nullable=False)
    sender_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    message = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)


class AdoptionNote(db.Model):
    __tablename__ = 'adoption_note'
    id = db.Column(db.Integer, primary_key=True)
    adoption_id = db.Column(db.Integer, db.ForeignKey('adoption.id'), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('user.id'))
    content = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)


class AdoptionFollowUp(db.Model):
    __tablename__ = 'adoption_follow_up'
    id = db.Column(db.Integer, primary_key=True)
    adoption_id = db.Column(db.Integer, db.ForeignKey('adoption.id'), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    notes = db.Column(db.Text, nullable=False)
    images = db.Column(db.JSON, nullable=False, default=list)
    conducted_by_id = db.Column(db.Integer, db.ForeignKey('user.id'))
