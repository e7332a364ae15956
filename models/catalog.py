"""
Lookup catalogs shown on the registration form
"""
from models import db


class _CatalogMixin:
    id = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(150), nullable=False)

    def to_dict(self):
        return {'id': self.id, 'nombre': self.nombre}


class University(_CatalogMixin, db.Model):
    __tablename__ = 'universities'


class UniversityPosition(_CatalogMixin, db.Model):
    __tablename__ = 'university_positions'


class EducationalProgram(_CatalogMixin, db.Model):
    __tablename__ = 'educational_programs'


class EducationalLevel(_CatalogMixin, db.Model):
    __tablename__ = 'educational_levels'
