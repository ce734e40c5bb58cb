"""
Win Service - Oportunidad ganada → Proyecto
===========================================

Orquesta el cierre ganado de una oportunidad:
1. Aplica (y confirma por separado) el patch fiscal opcional de la contraparte
2. Verifica que el perfil fiscal de la contraparte esté completo
3. Elige la cotización que gobierna el presupuesto
4. En UNA transacción: marca la oportunidad como ganada y crea el proyecto
   con sus líneas de presupuesto

Si falta información fiscal la operación devuelve la señal
``NEEDS_FISCAL_DATA`` sin modificar nada más. Cualquier falla de base de
datos en el paso 4 revierte la transacción completa: nunca queda una
oportunidad ganada sin su proyecto.
"""

from __future__ import annotations

from datetime import datetime, date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import (
    Oportunidad,
    Cotizacion,
    Proyecto,
    ProyectoRubro,
    Empresa,
    EtapaOportunidad,
    EstadoCotizacion,
    EstadoProyecto,
    CategoriaPresupuesto,
)
from services.base import (
    BaseService,
    ConflictException,
    ValidationException,
    FiscalDataRequired,
    service_action,
)
from services.calculation import QuoteCalculator
from services.fiscal.perfiles import campos_fiscales_faltantes
from services.patches import PerfilFiscalPatch
from services.pipeline_state import ETAPAS_ACTIVAS, PROBABILIDADES, es_activa


class WinService(BaseService[Oportunidad]):
    """Transición ganadora de oportunidades y materialización del proyecto."""

    model_class = Oportunidad

    @service_action
    def ganar(
        self,
        ctx,
        oportunidad_id: int,
        fiscal_patch: Union[PerfilFiscalPatch, Dict[str, Any], None] = None,
    ) -> Dict[str, Any]:
        """
        Marca la oportunidad como ganada y crea su proyecto.

        Args:
            ctx: WorkspaceContext del usuario
            oportunidad_id: ID de la oportunidad
            fiscal_patch: Datos fiscales de la contraparte a guardar antes
                          de evaluar la completitud (opcional)

        Returns:
            Dict con la oportunidad y el proyecto creado

        Raises:
            ConflictException: Si la oportunidad ya está ganada o perdida
            ValidationException: Si no hay contraparte o el patch es inválido
            FiscalDataRequired: Si el perfil fiscal sigue incompleto
        """
        oportunidad = self.get_by_id_or_fail(oportunidad_id, ctx.workspace_id)
        if not es_activa(oportunidad.etapa):
            raise ConflictException(
                f"La oportunidad ya está {oportunidad.etapa}",
                details={'oportunidad_id': oportunidad.id, 'etapa': oportunidad.etapa},
            )

        contraparte = oportunidad.contraparte
        if contraparte is None:
            raise ValidationException(
                "La oportunidad no tiene empresa ni contacto que actúe como contraparte",
                details={'oportunidad_id': oportunidad.id},
            )

        if fiscal_patch:
            self._aplicar_patch_fiscal(contraparte, fiscal_patch)

        db.session.refresh(contraparte)
        faltantes = campos_fiscales_faltantes(contraparte)
        if faltantes:
            raise FiscalDataRequired(faltantes, contraparte=self._ref_contraparte(contraparte))

        cotizacion = self.cotizacion_gobernante(oportunidad.id)
        presupuesto = self._presupuesto_total(oportunidad, cotizacion)
        horas = None
        if cotizacion is not None and cotizacion.es_detallada:
            horas = QuoteCalculator.horas_estimadas(cotizacion.items)

        ahora = datetime.utcnow()
        resultado = db.session.execute(
            update(Oportunidad)
            .where(
                Oportunidad.id == oportunidad.id,
                Oportunidad.workspace_id == ctx.workspace_id,
                Oportunidad.etapa.in_([etapa.value for etapa in ETAPAS_ACTIVAS]),
            )
            .values(
                etapa=EtapaOportunidad.GANADA.value,
                probabilidad=PROBABILIDADES[EtapaOportunidad.GANADA],
                razon_perdida=None,
                ultima_accion='Oportunidad ganada',
                ultima_accion_fecha=ahora,
                fecha_modificacion=ahora,
            )
        )
        if resultado.rowcount == 0:
            raise ConflictException(
                "La oportunidad ya fue ganada o cerrada por otra operación",
                details={'oportunidad_id': oportunidad.id},
            )

        proyecto = Proyecto(
            workspace_id=ctx.workspace_id,
            oportunidad_id=oportunidad.id,
            cotizacion_id=cotizacion.id if cotizacion else None,
            empresa_id=oportunidad.empresa_id,
            contacto_id=oportunidad.contacto_id,
            nombre=oportunidad.descripcion,
            estado=EstadoProyecto.EN_EJECUCION.value,
            presupuesto_total=presupuesto,
            horas_estimadas=horas,
            fecha_inicio=date.today(),
        )
        proyecto.rubros = self.lineas_presupuesto(cotizacion, presupuesto)
        db.session.add(proyecto)

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictException(
                "La oportunidad ya tiene un proyecto asociado",
                details={'oportunidad_id': oportunidad_id},
            )

        self._log_info(f"Oportunidad {oportunidad.id} ganada → proyecto {proyecto.id}")
        self._audit(ctx, f"oportunidad {oportunidad.id} ganada, proyecto {proyecto.id} "
                         f"presupuesto {presupuesto} cotizacion {proyecto.cotizacion_id}")
        return {
            'oportunidad': oportunidad.to_dict(),
            'proyecto': proyecto.to_dict(),
        }

    # ===== Helpers =====

    def _aplicar_patch_fiscal(self, contraparte, fiscal_patch) -> None:
        if not isinstance(fiscal_patch, PerfilFiscalPatch):
            fiscal_patch = PerfilFiscalPatch.from_dict(fiscal_patch)
        cambios = fiscal_patch.aplicar(contraparte)
        if cambios:
            self.commit()
            self._log_info(
                f"Perfil fiscal de {contraparte!r} actualizado: {', '.join(sorted(cambios))}"
            )

    @staticmethod
    def _ref_contraparte(contraparte) -> Dict[str, Any]:
        tipo = 'empresa' if isinstance(contraparte, Empresa) else 'contacto'
        return {'tipo': tipo, 'id': contraparte.id, 'nombre': contraparte.nombre}

    @staticmethod
    def cotizacion_gobernante(oportunidad_id: int) -> Optional[Cotizacion]:
        """La aceptada más reciente; si no hay, la más reciente en cualquier estado.

        El respaldo incluye cotizaciones rechazadas o vencidas.
        """
        base = Cotizacion.query.filter(Cotizacion.oportunidad_id == oportunidad_id)
        orden = (Cotizacion.fecha_creacion.desc(), Cotizacion.id.desc())
        aceptada = (
            base.filter(Cotizacion.estado == EstadoCotizacion.ACEPTADA.value)
            .order_by(*orden)
            .first()
        )
        return aceptada or base.order_by(*orden).first()

    @staticmethod
    def _presupuesto_total(oportunidad: Oportunidad, cotizacion: Optional[Cotizacion]) -> Decimal:
        if cotizacion is not None:
            return QuoteCalculator._to_decimal(cotizacion.valor_total)
        return QuoteCalculator._to_decimal(oportunidad.valor_estimado)

    @staticmethod
    def lineas_presupuesto(cotizacion: Optional[Cotizacion], presupuesto: Decimal) -> List[ProyectoRubro]:
        """Una línea por item de la cotización detallada; si no, una línea general."""
        if cotizacion is not None and cotizacion.es_detallada and cotizacion.items:
            return [
                ProyectoRubro(
                    nombre=item.nombre,
                    tipo=QuoteCalculator.categoria_item(item).value,
                    presupuestado=QuoteCalculator._to_decimal(item.subtotal),
                )
                for item in cotizacion.items
            ]
        return [
            ProyectoRubro(
                nombre='Presupuesto general',
                tipo=CategoriaPresupuesto.GENERAL.value,
                presupuestado=presupuesto,
            )
        ]
