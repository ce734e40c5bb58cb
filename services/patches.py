"""
Patches explícitos por entidad
==============================
Cada patch declara los campos que una operación de actualización acepta.
``from_dict`` rechaza campos desconocidos y valida tipos y catálogos, de
modo que un dato mal escrito no se ignore en silencio.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from models.enums import (
    TriState,
    TipoPersona,
    RegimenTributario,
    TipoDocumento,
    TipoRubro,
    valores,
)
from services.base import ValidationException


def decimal_valido(nombre: str, valor: Any, minimo: Decimal = Decimal('0')) -> Optional[Decimal]:
    if valor is None:
        return None
    try:
        numero = Decimal(str(valor))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationException(f"{nombre} debe ser numérico", details={'campo': nombre})
    if not numero.is_finite() or numero < minimo:
        raise ValidationException(f"{nombre} debe ser mayor o igual a {minimo}", details={'campo': nombre})
    return numero


def _catalogo(nombre: str, valor: Any, enum_cls) -> Optional[str]:
    if valor is None:
        return None
    try:
        return enum_cls(valor).value
    except ValueError:
        raise ValidationException(
            f"{nombre} no válido: {valor}",
            details={'campo': nombre, 'permitidos': valores(enum_cls)},
        )


def _texto(nombre: str, valor: Any, requerido: bool = False) -> Optional[str]:
    if valor is None:
        if requerido:
            raise ValidationException(f"{nombre} es requerido", details={'campo': nombre})
        return None
    texto = str(valor).strip()
    if requerido and not texto:
        raise ValidationException(f"{nombre} es requerido", details={'campo': nombre})
    return texto


class _Patch:
    """Base: construcción desde dict y cambios efectivos."""

    @classmethod
    def campos(cls):
        return {f.name for f in fields(cls)}

    @classmethod
    def _verificar_campos(cls, data: Dict[str, Any]):
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationException("Se esperaba un objeto con los campos a actualizar")
        desconocidos = sorted(set(data) - cls.campos())
        if desconocidos:
            raise ValidationException(
                f"Campos no permitidos: {', '.join(desconocidos)}",
                details={'campos_desconocidos': desconocidos},
            )
        return data

    def cambios(self) -> Dict[str, Any]:
        """Campos provistos (distintos de None)."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def aplicar(self, instancia) -> Dict[str, Any]:
        cambios = self.cambios()
        for campo, valor in cambios.items():
            setattr(instancia, campo, valor)
        return cambios


@dataclass
class CotizacionPatch(_Patch):
    descripcion: Optional[str] = None
    valor_total: Optional[Decimal] = None
    notas: Optional[str] = None
    condiciones_pago: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CotizacionPatch':
        data = cls._verificar_campos(data)
        return cls(
            descripcion=_texto('descripcion', data.get('descripcion')),
            valor_total=decimal_valido('valor_total', data.get('valor_total')),
            notas=_texto('notas', data.get('notas')),
            condiciones_pago=_texto('condiciones_pago', data.get('condiciones_pago')),
        )


@dataclass
class RubroPatch(_Patch):
    tipo: Optional[str] = None
    descripcion: Optional[str] = None
    cantidad: Optional[Decimal] = None
    unidad: Optional[str] = None
    valor_unitario: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], requiere_tipo: bool = False) -> 'RubroPatch':
        data = cls._verificar_campos(data)
        if requiere_tipo and not data.get('tipo'):
            raise ValidationException("tipo de rubro es requerido", details={'campo': 'tipo'})
        return cls(
            tipo=_catalogo('tipo', data.get('tipo'), TipoRubro),
            descripcion=_texto('descripcion', data.get('descripcion')),
            cantidad=decimal_valido('cantidad', data.get('cantidad')),
            unidad=_texto('unidad', data.get('unidad')),
            valor_unitario=decimal_valido('valor_unitario', data.get('valor_unitario')),
        )


@dataclass
class PerfilFiscalPatch(_Patch):
    """Datos fiscales de la contraparte capturados al ganar una oportunidad."""

    numero_documento: Optional[str] = None
    tipo_documento: Optional[str] = None
    tipo_persona: Optional[str] = None
    regimen_tributario: Optional[str] = None
    gran_contribuyente: Optional[str] = None
    agente_retenedor: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PerfilFiscalPatch':
        data = cls._verificar_campos(data)
        return cls(
            numero_documento=_texto('numero_documento', data.get('numero_documento')) or None,
            tipo_documento=_catalogo('tipo_documento', data.get('tipo_documento'), TipoDocumento),
            tipo_persona=_catalogo('tipo_persona', data.get('tipo_persona'), TipoPersona),
            regimen_tributario=_catalogo('regimen_tributario', data.get('regimen_tributario'), RegimenTributario),
            gran_contribuyente=cls._tristate('gran_contribuyente', data),
            agente_retenedor=cls._tristate('agente_retenedor', data),
        )

    @staticmethod
    def _tristate(nombre: str, data: Dict[str, Any]) -> Optional[str]:
        if nombre not in data:
            return None
        try:
            return TriState.parse(data[nombre]).value
        except ValueError:
            raise ValidationException(f"{nombre} no válido: {data[nombre]!r}", details={'campo': nombre})
