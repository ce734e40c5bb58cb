"""Modelos del pipeline comercial: Oportunidad"""
from datetime import datetime
from decimal import Decimal
from extensions import db
from models.enums import EtapaOportunidad


class Oportunidad(db.Model):
    __tablename__ = 'oportunidades'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False, index=True)
    contacto_id = db.Column(db.Integer, db.ForeignKey('contactos.id'), nullable=True)
    empresa_id = db.Column(db.Integer, db.ForeignKey('empresas.id'), nullable=True)
    descripcion = db.Column(db.String(300), nullable=False)
    valor_estimado = db.Column(db.Numeric(15, 2), default=0)
    etapa = db.Column(db.String(30), nullable=False, default=EtapaOportunidad.LEAD_NUEVO.value, index=True)
    probabilidad = db.Column(db.Integer, nullable=False, default=10)
    razon_perdida = db.Column(db.String(30))
    ultima_accion = db.Column(db.String(200))
    ultima_accion_fecha = db.Column(db.DateTime)
    fecha_cierre_estimada = db.Column(db.Date)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)
    fecha_modificacion = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relaciones
    contacto = db.relationship('Contacto', back_populates='oportunidades')
    empresa = db.relationship('Empresa', back_populates='oportunidades')
    cotizaciones = db.relationship('Cotizacion', back_populates='oportunidad',
                                   cascade='all, delete-orphan', lazy='dynamic')
    proyecto = db.relationship('Proyecto', back_populates='oportunidad', uselist=False)

    def __repr__(self):
        return f'<Oportunidad {self.id} {self.etapa}>'

    @property
    def contraparte(self):
        """Empresa contraparte o, en el flujo persona natural, el contacto."""
        return self.empresa or self.contacto

    def to_dict(self):
        return {
            'id': self.id,
            'descripcion': self.descripcion,
            'valor_estimado': float(self.valor_estimado or Decimal('0')),
            'etapa': self.etapa,
            'probabilidad': self.probabilidad,
            'razon_perdida': self.razon_perdida,
            'ultima_accion': self.ultima_accion,
            'ultima_accion_fecha': self.ultima_accion_fecha.isoformat() if self.ultima_accion_fecha else None,
            'contacto_id': self.contacto_id,
            'empresa_id': self.empresa_id,
        }
