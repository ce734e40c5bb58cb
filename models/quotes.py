"""Modelos de Cotizaciones, Items, Rubros y catálogo de Servicios"""
from datetime import datetime
from extensions import db
from sqlalchemy import text
from models.enums import EstadoCotizacion, ModoCotizacion


def _float(value):
    return float(value) if value is not None else None


class Cotizacion(db.Model):
    __tablename__ = 'cotizaciones'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False, index=True)
    oportunidad_id = db.Column(db.Integer, db.ForeignKey('oportunidades.id'), nullable=False, index=True)
    # No único: el provisional COT-<año>-0000 puede repetirse
    consecutivo = db.Column(db.String(30), nullable=False, index=True)
    modo = db.Column(db.String(20), nullable=False, default=ModoCotizacion.FLASH.value)
    estado = db.Column(db.String(20), nullable=False, default=EstadoCotizacion.BORRADOR.value)
    descripcion = db.Column(db.Text)
    valor_total = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    costo_total = db.Column(db.Numeric(15, 2))  # NULL en modo flash
    margen_porcentaje = db.Column(db.Numeric(6, 1))  # NULL en modo flash o sin venta
    notas = db.Column(db.Text)
    condiciones_pago = db.Column(db.Text)
    duplicada_de = db.Column(db.Integer, db.ForeignKey('cotizaciones.id'), nullable=True)
    fecha_envio = db.Column(db.DateTime)
    fecha_validez = db.Column(db.Date)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    fecha_modificacion = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # A lo sumo una cotización enviada por oportunidad
    __table_args__ = (
        db.Index(
            'uq_cotizaciones_enviada_por_oportunidad',
            'oportunidad_id',
            unique=True,
            sqlite_where=text("estado = 'enviada'"),
            postgresql_where=text("estado = 'enviada'"),
        ),
    )

    # Relaciones
    oportunidad = db.relationship('Oportunidad', back_populates='cotizaciones')
    items = db.relationship('ItemCotizacion', back_populates='cotizacion',
                            cascade='all, delete-orphan', order_by='ItemCotizacion.orden')
    origen = db.relationship('Cotizacion', remote_side=[id])

    def __repr__(self):
        return f'<Cotizacion {self.consecutivo} {self.estado}>'

    @property
    def es_detallada(self):
        return self.modo == ModoCotizacion.DETALLADA.value

    def to_dict(self, incluir_items=False):
        data = {
            'id': self.id,
            'oportunidad_id': self.oportunidad_id,
            'consecutivo': self.consecutivo,
            'modo': self.modo,
            'estado': self.estado,
            'descripcion': self.descripcion,
            'valor_total': _float(self.valor_total) or 0.0,
            'costo_total': _float(self.costo_total),
            'margen_porcentaje': _float(self.margen_porcentaje),
            'notas': self.notas,
            'condiciones_pago': self.condiciones_pago,
            'duplicada_de': self.duplicada_de,
            'fecha_envio': self.fecha_envio.isoformat() if self.fecha_envio else None,
            'fecha_validez': self.fecha_validez.isoformat() if self.fecha_validez else None,
        }
        if incluir_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data


class ItemCotizacion(db.Model):
    __tablename__ = 'items_cotizacion'

    id = db.Column(db.Integer, primary_key=True)
    cotizacion_id = db.Column(db.Integer, db.ForeignKey('cotizaciones.id'), nullable=False, index=True)
    nombre = db.Column(db.String(200), nullable=False)
    orden = db.Column(db.Integer, nullable=False, default=0)
    subtotal = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    servicio_origen_id = db.Column(db.Integer, db.ForeignKey('servicios.id'), nullable=True)

    cotizacion = db.relationship('Cotizacion', back_populates='items')
    rubros = db.relationship('Rubro', back_populates='item',
                             cascade='all, delete-orphan', order_by='Rubro.orden')

    def __repr__(self):
        return f'<ItemCotizacion {self.nombre} {self.subtotal}>'

    def to_dict(self):
        return {
            'id': self.id,
            'nombre': self.nombre,
            'orden': self.orden,
            'subtotal': _float(self.subtotal) or 0.0,
            'servicio_origen_id': self.servicio_origen_id,
            'rubros': [rubro.to_dict() for rubro in self.rubros],
        }


class Rubro(db.Model):
    __tablename__ = 'rubros'

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey('items_cotizacion.id'), nullable=False, index=True)
    tipo = db.Column(db.String(30), nullable=False)
    descripcion = db.Column(db.String(300))
    cantidad = db.Column(db.Numeric(12, 2), nullable=False, default=1)
    unidad = db.Column(db.String(30))
    valor_unitario = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    valor_total = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    orden = db.Column(db.Integer, nullable=False, default=0)

    item = db.relationship('ItemCotizacion', back_populates='rubros')

    def __repr__(self):
        return f'<Rubro {self.tipo} {self.cantidad}x{self.valor_unitario}>'

    def to_dict(self):
        return {
            'id': self.id,
            'tipo': self.tipo,
            'descripcion': self.descripcion,
            'cantidad': _float(self.cantidad),
            'unidad': self.unidad,
            'valor_unitario': _float(self.valor_unitario),
            'valor_total': _float(self.valor_total),
            'orden': self.orden,
        }


class Servicio(db.Model):
    """Servicio del catálogo usado como plantilla de items"""
    __tablename__ = 'servicios'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False, index=True)
    nombre = db.Column(db.String(200), nullable=False)
    precio_estandar = db.Column(db.Numeric(15, 2), default=0)
    costo_estimado = db.Column(db.Numeric(15, 2))
    # [{tipo, descripcion, cantidad, unidad, valor_unitario}]
    rubros_template = db.Column(db.JSON)
    activo = db.Column(db.Boolean, default=True, nullable=False)
    fecha_creacion = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Servicio {self.nombre}>'


class ConsecutivoCotizacion(db.Model):
    """Último número emitido por workspace y año"""
    __tablename__ = 'consecutivos_cotizacion'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=False)
    anio = db.Column(db.Integer, nullable=False)
    ultimo = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint('workspace_id', 'anio', name='uq_consecutivo_workspace_anio'),
    )

    def __repr__(self):
        return f'<ConsecutivoCotizacion {self.workspace_id}/{self.anio}: {self.ultimo}>'


__all__ = ['Cotizacion', 'ItemCotizacion', 'Rubro', 'Servicio', 'ConsecutivoCotizacion']
