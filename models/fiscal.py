"""Perfil fiscal del vendedor (uno por workspace)"""
from datetime import datetime
from extensions import db
from models.enums import TriState


class PerfilFiscal(db.Model):
    __tablename__ = 'perfiles_fiscales'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False, unique=True)
    nit = db.Column(db.String(30))
    razon_social = db.Column(db.String(200))
    tipo_persona = db.Column(db.String(20))  # natural, juridica
    regimen_tributario = db.Column(db.String(20))  # ordinario, simple
    es_declarante = db.Column(db.String(10), nullable=False, default=TriState.UNSET.value)
    responsable_iva = db.Column(db.String(10), nullable=False, default=TriState.UNSET.value)
    autorretenedor = db.Column(db.String(10), nullable=False, default=TriState.UNSET.value)
    tarifa_ica = db.Column(db.Numeric(6, 3))  # por mil
    ciudad_ica = db.Column(db.String(100))
    fecha_modificacion = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    workspace = db.relationship('Workspace', back_populates='perfil_fiscal')

    def __repr__(self):
        return f'<PerfilFiscal workspace={self.workspace_id} {self.tipo_persona}/{self.regimen_tributario}>'

    def to_dict(self):
        return {
            'id': self.id,
            'nit': self.nit,
            'razon_social': self.razon_social,
            'tipo_persona': self.tipo_persona,
            'regimen_tributario': self.regimen_tributario,
            'es_declarante': self.es_declarante,
            'responsable_iva': self.responsable_iva,
            'autorretenedor': self.autorretenedor,
            'tarifa_ica': float(self.tarifa_ica) if self.tarifa_ica is not None else None,
            'ciudad_ica': self.ciudad_ica,
        }
