"""Modelos de Proyectos y sus líneas de presupuesto"""
from datetime import datetime, date
from extensions import db
from models.enums import EstadoProyecto


class Proyecto(db.Model):
    __tablename__ = 'proyectos'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False, index=True)
    # Un proyecto por oportunidad ganada
    oportunidad_id = db.Column(db.Integer, db.ForeignKey('oportunidades.id'), nullable=False, unique=True)
    cotizacion_id = db.Column(db.Integer, db.ForeignKey('cotizaciones.id'), nullable=True)
    empresa_id = db.Column(db.Integer, db.ForeignKey('empresas.id'), nullable=True)
    contacto_id = db.Column(db.Integer, db.ForeignKey('contactos.id'), nullable=True)
    nombre = db.Column(db.String(300), nullable=False)
    estado = db.Column(db.String(20), nullable=False, default=EstadoProyecto.EN_EJECUCION.value)
    presupuesto_total = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    horas_estimadas = db.Column(db.Numeric(10, 2))
    ganancia_estimada = db.Column(db.Numeric(15, 2))
    retenciones_estimadas = db.Column(db.Numeric(15, 2))
    canal_creacion = db.Column(db.String(30), default='oportunidad_ganada')
    fecha_inicio = db.Column(db.Date, default=date.today)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)

    # Relaciones
    oportunidad = db.relationship('Oportunidad', back_populates='proyecto')
    cotizacion = db.relationship('Cotizacion')
    empresa = db.relationship('Empresa')
    contacto = db.relationship('Contacto')
    rubros = db.relationship('ProyectoRubro', back_populates='proyecto',
                             cascade='all, delete-orphan', order_by='ProyectoRubro.id')

    def __repr__(self):
        return f'<Proyecto {self.nombre}>'

    def to_dict(self):
        return {
            'id': self.id,
            'nombre': self.nombre,
            'estado': self.estado,
            'oportunidad_id': self.oportunidad_id,
            'cotizacion_id': self.cotizacion_id,
            'empresa_id': self.empresa_id,
            'contacto_id': self.contacto_id,
            'presupuesto_total': float(self.presupuesto_total or 0),
            'horas_estimadas': float(self.horas_estimadas) if self.horas_estimadas is not None else None,
            'ganancia_estimada': None if self.ganancia_estimada is None else float(self.ganancia_estimada),
            'retenciones_estimadas': None if self.retenciones_estimadas is None else float(self.retenciones_estimadas),
            'fecha_inicio': self.fecha_inicio.isoformat() if self.fecha_inicio else None,
            'rubros': [rubro.to_dict() for rubro in self.rubros],
        }


class ProyectoRubro(db.Model):
    """Línea de presupuesto del proyecto"""
    __tablename__ = 'proyecto_rubros'

    id = db.Column(db.Integer, primary_key=True)
    proyecto_id = db.Column(db.Integer, db.ForeignKey('proyectos.id'), nullable=False, index=True)
    nombre = db.Column(db.String(200), nullable=False)
    tipo = db.Column(db.String(30), nullable=False)
    presupuestado = db.Column(db.Numeric(15, 2), nullable=False, default=0)

    proyecto = db.relationship('Proyecto', back_populates='rubros')

    def __repr__(self):
        return f'<ProyectoRubro {self.tipo} {self.presupuestado}>'

    def to_dict(self):
        return {
            'id': self.id,
            'nombre': self.nombre,
            'tipo': self.tipo,
            'presupuestado': float(self.presupuestado or 0),
        }
