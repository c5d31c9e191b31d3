import enum
from pet_market import db
from pet_market.utils.util import utcnow


class PetStatus(enum.Enum):
    AVAILABLE = 'available'
    PENDING = 'pending'
    ADOPTED = 'adopted'


class Species(enum.Enum):
    DOG = 'dog'
    CAT = 'cat'
    BIRD = 'bird'
    FISH = 'fish'
    SMALL_ANIMAL = 'small_animal'
    REPTILE = 'reptile'
    OTHER = 'other'


class AgeUnit(enum.Enum):
    DAYS = 'days'
    MONTHS = 'months'
    YEARS = 'years'


class Gender(enum.Enum):
    MALE = 'male'
    FEMALE = 'female'
    UNKNOWN = 'unknown'


class Size(enum.Enum):
    SMALL = 'small'
    MEDIUM = 'medium'
    LARGE = 'large'
    EXTRA_LARGE = 'extra_large'


class Pet(db.Model):
    __tablename__ = 'pet'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    species = db.Column(db.Enum(Species), nullable=False)
    breed = db.Column(db.String(100), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    age_unit = db.Column(db.Enum(AgeUnit), nullable=False, default=AgeUnit.YEARS)
    gender = db.Column(db.Enum(Gender), nullable=False)
    size = db.Column(db.Enum(Size), nullable=False)
    color = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=False)
    medical_history = db.Column(db.Text)
    vaccinated = db.Column(db.Boolean, nullable=False, default=False)
    neutered = db.Column(db.Boolean, nullable=False, default=False)
    trained = db.Column(db.Boolean, nullable=False, default=False)
    temperament = db.Column(db.JSON, nullable=False, default=list)
    images = db.Column(db.JSON, nullable=False, default=list)
    adoption_fee = db.Column(db.Float, nullable=False, default=0)
    status = db.Column(db.Enum(PetStatus), nullable=False, default=PetStatus.AVAILABLE)
    provider_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    adopted_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    adoption_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    provider = db.relationship('User', foreign_keys=[provider_id], backref=db.backref('pets_listed', lazy=True))
    adopted_by = db.relationship('User', foreign_keys=[adopted_by_id])

    def __repr__(self):
        return f'<Pet {self.name} ({self.species})>'
