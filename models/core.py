"""
Modelos Core: Workspace y Usuario
Cada registro comercial pertenece a un workspace; el usuario autenticado
resuelve su workspace a través de ``Usuario.workspace_id``.
"""

from datetime import datetime
from flask_login import UserMixin
from extensions import db


class Workspace(db.Model):
    __tablename__ = 'workspaces'

    id = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(200), nullable=False)
    activo = db.Column(db.Boolean, default=True, nullable=False)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)

    # Relaciones
    usuarios = db.relationship('Usuario', back_populates='workspace', lazy='dynamic')
    perfil_fiscal = db.relationship('PerfilFiscal', back_populates='workspace', uselist=False)

    def __repr__(self):
        return f'<Workspace {self.nombre}>'


class Usuario(UserMixin, db.Model):
    __tablename__ = 'usuarios'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    nombre = db.Column(db.String(150), nullable=False)
    rol = db.Column(db.String(30), default='owner', nullable=False)
    activo = db.Column(db.Boolean, default=True, nullable=False)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=True)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)

    workspace = db.relationship('Workspace', back_populates='usuarios')

    def __repr__(self):
        return f'<Usuario {self.email}>'

    @property
    def is_active(self):
        return bool(self.activo)
