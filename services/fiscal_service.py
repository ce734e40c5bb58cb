"""
Fiscal Service
==============
Une los perfiles persistidos (vendedor del workspace y contraparte de la
oportunidad) con el motor de cálculo para obtener el resumen fiscal de
una cotización.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from models import Cotizacion, PerfilFiscal
from services.base import BaseService, ValidationException, service_action
from services.fiscal.calculos import calcular_desglose, resumen_fiscal
from services.fiscal.perfiles import (
    campos_fiscales_faltantes,
    perfil_cliente_desde,
    perfil_vendedor_desde,
)


class FiscalService(BaseService[Cotizacion]):
    """Resumen fiscal de cotizaciones."""

    model_class = Cotizacion

    def perfil_vendedor(self, workspace_id: int):
        perfil = PerfilFiscal.query.filter_by(workspace_id=workspace_id).first()
        return perfil_vendedor_desde(perfil)

    @service_action
    def resumen_cotizacion(self, ctx, cotizacion_id: int) -> Dict[str, Any]:
        """
        Calcula IVA, retenciones, neto, seguridad social y ganancia real de
        una cotización.

        Cuando algún perfil está incompleto el cálculo usa los perfiles por
        defecto y el resultado se marca como estimado.

        Raises:
            NotFoundException: Si la cotización no es del workspace
            ValidationException: Si la cotización no tiene valor positivo
        """
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        contraparte = cotizacion.oportunidad.contraparte

        resumen = resumen_fiscal(
            cotizacion.valor_total,
            cotizacion.costo_total or 0,
            vendedor=self.perfil_vendedor(ctx.workspace_id),
            cliente=perfil_cliente_desde(contraparte),
        )
        if resumen is None:
            raise ValidationException(
                "La cotización no tiene un valor positivo para calcular impuestos",
                details={'cotizacion_id': cotizacion.id},
            )

        data = resumen.to_dict()
        data['cotizacion_id'] = cotizacion.id
        data['campos_fiscales_faltantes'] = campos_fiscales_faltantes(contraparte)
        return data

    @service_action
    def simular(self, ctx, valor_bruto, contraparte=None) -> Optional[Dict[str, Any]]:
        """Desglose de un valor bruto con el perfil del workspace; None si no es positivo."""
        desglose = calcular_desglose(
            valor_bruto,
            vendedor=self.perfil_vendedor(ctx.workspace_id),
            cliente=perfil_cliente_desde(contraparte),
        )
        return desglose.to_dict() if desglose else None
