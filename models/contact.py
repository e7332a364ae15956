"""
Contact form questions and their replies
"""
from models import db
from datetime import datetime

STATE_PENDING = 'pendiente'
STATE_ANSWERED = 'respondido'


class ContactMessage(db.Model):
    """Question submitted through the public contact form (user_id is NULL for non-members)"""
    __tablename__ = 'contact_messages'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    nombre = db.Column(db.String(100), nullable=False)
    apellido_paterno = db.Column(db.String(100), nullable=False)
    apellido_materno = db.Column(db.String(100), nullable=True, default='')
    correo_electronico = db.Column(db.String(120), nullable=False)
    telefono = db.Column(db.String(20), nullable=True)
    mensaje = db.Column(db.Text, nullable=False)
    estado = db.Column(db.String(20), nullable=False, default=STATE_PENDING)
    creado_en = db.Column(db.DateTime, default=datetime.utcnow)

    replies = db.relationship('ContactReply', backref='message', lazy=True,
                              order_by='ContactReply.respondido_en',
                              cascade='all, delete-orphan')

    def __repr__(self):
        return f'<ContactMessage {self.id}>'


class ContactReply(db.Model):
    """Reply to a contact question; respondido_por is NULL for admin replies"""
    __tablename__ = 'contact_replies'

    id = db.Column(db.Integer, primary_key=True)
    mensaje_id = db.Column(db.Integer, db.ForeignKey('contact_messages.id', ondelete='CASCADE'), nullable=False)
    respuesta = db.Column(db.Text, nullable=False)
    respondido_por = db.Column(db.Integer, nullable=True)
    respondido_en = db.Column(db.DateTime, default=datetime.utcnow)
