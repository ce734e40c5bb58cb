"""
Models for contacts and counterparty companies
"""
from extensions import db
from datetime import datetime
from models.enums import TriState


class IdentidadFiscalMixin:
    """Columnas de identidad fiscal compartidas por Empresa y Contacto.

    Los booleanos fiscales se guardan como TriState: 'unset' significa que
    el dato nunca se capturó y no equivale a 'no'.
    """

    tipo_documento = db.Column(db.String(20))  # CC, CE, NIT, PASAPORTE
    numero_documento = db.Column(db.String(30))
    tipo_persona = db.Column(db.String(20))  # natural, juridica
    regimen_tributario = db.Column(db.String(20))  # ordinario, simple
    gran_contribuyente = db.Column(db.String(10), nullable=False, default=TriState.UNSET.value)
    agente_retenedor = db.Column(db.String(10), nullable=False, default=TriState.UNSET.value)

    @property
    def gran_contribuyente_estado(self) -> TriState:
        return TriState.parse(self.gran_contribuyente)

    @property
    def agente_retenedor_estado(self) -> TriState:
        return TriState.parse(self.agente_retenedor)

    def identidad_fiscal_dict(self):
        return {
            'tipo_documento': self.tipo_documento,
            'numero_documento': self.numero_documento,
            'tipo_persona': self.tipo_persona,
            'regimen_tributario': self.regimen_tributario,
            'gran_contribuyente': self.gran_contribuyente,
            'agente_retenedor': self.agente_retenedor,
        }


class Empresa(IdentidadFiscalMixin, db.Model):
    """Empresa contraparte de una oportunidad"""
    __tablename__ = 'empresas'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False, index=True)
    nombre = db.Column(db.String(200), nullable=False)
    sector = db.Column(db.String(100))
    ciudad = db.Column(db.String(100))
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)
    fecha_modificacion = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    oportunidades = db.relationship('Oportunidad', back_populates='empresa', lazy='dynamic')

    def __repr__(self):
        return f'<Empresa {self.nombre}>'

    def to_dict(self):
        data = {
            'id': self.id,
            'nombre': self.nombre,
            'sector': self.sector,
            'ciudad': self.ciudad,
        }
        data.update(self.identidad_fiscal_dict())
        return data


class Contacto(IdentidadFiscalMixin, db.Model):
    """Persona de contacto; actúa como contraparte cuando no hay empresa"""
    __tablename__ = 'contactos'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False, index=True)
    nombre = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120))
    telefono = db.Column(db.String(30))
    empresa_id = db.Column(db.Integer, db.ForeignKey('empresas.id'), nullable=True)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)

    empresa = db.relationship('Empresa')
    oportunidades = db.relationship('Oportunidad', back_populates='contacto', lazy='dynamic')

    def __repr__(self):
        return f'<Contacto {self.nombre}>'

    def to_dict(self):
        data = {
            'id': self.id,
            'nombre': self.nombre,
            'email': self.email,
            'telefono': self.telefono,
            'empresa_id': self.empresa_id,
        }
        data.update(self.identidad_fiscal_dict())
        return data
