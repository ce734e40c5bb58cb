"""
Models Package
==============
Modelos del núcleo comercial organizados por funcionalidad.

Estructura:
- core: Workspace, Usuario
- clients: Empresa, Contacto (identidad fiscal de la contraparte)
- fiscal: PerfilFiscal del vendedor
- pipeline: Oportunidad
- quotes: Cotizacion, ItemCotizacion, Rubro, Servicio, ConsecutivoCotizacion
- projects: Proyecto, ProyectoRubro
- enums: estados y catálogos cerrados
"""

from extensions import db

from models.core import Workspace, Usuario
from models.clients import Empresa, Contacto
from models.fiscal import PerfilFiscal
from models.pipeline import Oportunidad
from models.quotes import (
    Cotizacion,
    ItemCotizacion,
    Rubro,
    Servicio,
    ConsecutivoCotizacion,
)
from models.projects import Proyecto, ProyectoRubro
from models.enums import (
    TriState,
    TipoPersona,
    RegimenTributario,
    TipoDocumento,
    EtapaOportunidad,
    RazonPerdida,
    EstadoCotizacion,
    ModoCotizacion,
    TipoRubro,
    CategoriaPresupuesto,
    EstadoProyecto,
)

__all__ = [
    'db',
    'Workspace',
    'Usuario',
    'Empresa',
    'Contacto',
    'PerfilFiscal',
    'Oportunidad',
    'Cotizacion',
    'ItemCotizacion',
    'Rubro',
    'Servicio',
    'ConsecutivoCotizacion',
    'Proyecto',
    'ProyectoRubro',
    'TriState',
    'TipoPersona',
    'RegimenTributario',
    'TipoDocumento',
    'EtapaOportunidad',
    'RazonPerdida',
    'EstadoCotizacion',
    'ModoCotizacion',
    'TipoRubro',
    'CategoriaPresupuesto',
    'EstadoProyecto',
]
