"""
Quote Service - Gestión de cotizaciones
=======================================

Este servicio gestiona la lógica de negocio de las cotizaciones:
- Creación en modo flash (un solo monto) o detallado (items y rubros)
- Edición de items y rubros con recálculo sincrónico de subtotales,
  costo total y margen
- Plantillas desde el catálogo de servicios
- Transiciones: enviar, aceptar, rechazar, reabrir, vencer
- Duplicación desde cualquier estado

Las transiciones se confirman con un UPDATE condicionado al estado previo
esperado; junto con el índice parcial único de cotizaciones enviadas, una
carrera perdida produce el mismo conflicto que vería un llamador secuencial.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import (
    Cotizacion,
    ItemCotizacion,
    Rubro,
    Servicio,
    Oportunidad,
    EstadoCotizacion,
    ModoCotizacion,
    TipoRubro,
)
from models.enums import UNIDAD_POR_DEFECTO
from services.base import (
    ActionResult,
    BaseService,
    ConflictException,
    NotFoundException,
    ValidationException,
    service_action,
)
from services.calculation import QuoteCalculator
from services.consecutivos import siguiente_consecutivo
from services.fiscal.calculos import precio_sugerido
from services.patches import CotizacionPatch, RubroPatch
from services.pipeline_state import es_activa
from services.quote_state import (
    ACCIONES_TRANSICION,
    acciones_disponibles,
    es_editable,
    esta_vencida,
)
from services.win_service import WinService


DEFAULT_VIGENCIA_DIAS = 30


class QuoteService(BaseService[Cotizacion]):
    """
    Servicio para gestión de cotizaciones.

    Todas las operaciones públicas reciben el WorkspaceContext como primer
    argumento y devuelven un ActionResult.
    """

    model_class = Cotizacion

    # ===== Consultas =====

    @service_action
    def obtener(self, ctx, cotizacion_id: int) -> Dict[str, Any]:
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        return self._serializar(cotizacion, incluir_items=True)

    @service_action
    def listar_por_oportunidad(self, ctx, oportunidad_id: int) -> List[Dict[str, Any]]:
        self._get_scoped(Oportunidad, oportunidad_id, ctx.workspace_id)
        cotizaciones = (
            Cotizacion.query
            .filter_by(workspace_id=ctx.workspace_id, oportunidad_id=oportunidad_id)
            .order_by(Cotizacion.fecha_creacion.desc(), Cotizacion.id.desc())
            .all()
        )
        return [self._serializar(c) for c in cotizaciones]

    # ===== Creación =====

    @service_action
    def crear_flash(self, ctx, oportunidad_id: int, valor_total, descripcion: Optional[str] = None) -> Dict[str, Any]:
        """
        Crea una cotización flash: un solo monto de venta, sin costo ni margen.

        Raises:
            ValidationException: Si el valor es negativo o no numérico
            ConflictException: Si la oportunidad ya está cerrada
        """
        patch = CotizacionPatch.from_dict({'valor_total': valor_total, 'descripcion': descripcion})
        cotizacion = self._nueva(ctx, oportunidad_id, ModoCotizacion.FLASH, patch)
        return self._serializar(cotizacion)

    @service_action
    def crear_detallada(self, ctx, oportunidad_id: int, descripcion: Optional[str] = None,
                        valor_total=None) -> Dict[str, Any]:
        """Crea una cotización detallada vacía; sus items se agregan después."""
        patch = CotizacionPatch.from_dict({'valor_total': valor_total, 'descripcion': descripcion})
        cotizacion = self._nueva(ctx, oportunidad_id, ModoCotizacion.DETALLADA, patch)
        return self._serializar(cotizacion, incluir_items=True)

    def _nueva(self, ctx, oportunidad_id: int, modo: ModoCotizacion, patch: CotizacionPatch) -> Cotizacion:
        oportunidad = self._get_scoped(Oportunidad, oportunidad_id, ctx.workspace_id)
        if not es_activa(oportunidad.etapa):
            raise ConflictException(
                f"La oportunidad está {oportunidad.etapa}; no admite cotizaciones nuevas",
                details={'oportunidad_id': oportunidad.id, 'etapa': oportunidad.etapa},
            )

        consecutivo = siguiente_consecutivo(ctx.workspace_id)
        cotizacion = Cotizacion(
            workspace_id=ctx.workspace_id,
            oportunidad_id=oportunidad_id,
            consecutivo=consecutivo,
            modo=modo.value,
            estado=EstadoCotizacion.BORRADOR.value,
            descripcion=patch.descripcion,
            valor_total=patch.valor_total or Decimal('0'),
        )
        self._recalcular_cotizacion(cotizacion)
        db.session.add(cotizacion)
        self.commit()
        self._log_info(f"Cotización {consecutivo} ({modo.value}) creada para oportunidad {oportunidad_id}")
        return cotizacion

    # ===== Edición de borradores =====

    @service_action
    def actualizar(self, ctx, cotizacion_id: int,
                   patch: Union[CotizacionPatch, Dict[str, Any]]) -> Dict[str, Any]:
        """Actualiza descripción, valor de venta, notas o condiciones de un borrador."""
        if not isinstance(patch, CotizacionPatch):
            patch = CotizacionPatch.from_dict(patch)
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_editable(cotizacion)

        patch.aplicar(cotizacion)
        self._recalcular_cotizacion(cotizacion)
        self.commit()
        return self._serializar(cotizacion)

    @service_action
    def aplicar_margen(self, ctx, cotizacion_id: int, margen_porcentaje) -> Dict[str, Any]:
        """Fija el valor de venta que deja el margen pedido sobre el costo actual."""
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_editable(cotizacion)
        self._exigir_detallada(cotizacion)
        margen = QuoteCalculator._to_decimal(margen_porcentaje)
        if margen < 0 or margen >= 100:
            raise ValidationException("El margen debe estar entre 0 y 100", details={'margen': str(margen)})

        costo = QuoteCalculator.costo_total(cotizacion.items)
        cotizacion.valor_total = precio_sugerido(costo, margen)
        self._recalcular_cotizacion(cotizacion)
        self.commit()
        return self._serializar(cotizacion)

    # ===== Items =====

    @service_action
    def agregar_item(self, ctx, cotizacion_id: int, nombre: str,
                     rubros: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """
        Agrega un item (con rubros opcionales) a una cotización detallada en borrador.

        Returns:
            Dict con el item creado y los totales recalculados de la cotización
        """
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_editable(cotizacion)
        self._exigir_detallada(cotizacion)
        if not nombre or not str(nombre).strip():
            raise ValidationException("El nombre del item es requerido")

        item = ItemCotizacion(nombre=str(nombre).strip(), orden=self._siguiente_orden(cotizacion.items))
        for datos in rubros or []:
            item.rubros.append(self._nuevo_rubro(item, RubroPatch.from_dict(datos, requiere_tipo=True)))
        cotizacion.items.append(item)

        self._recalcular_item(item)
        self._recalcular_cotizacion(cotizacion)
        self.commit()
        return {'item': item.to_dict(), 'cotizacion': self._serializar(cotizacion)}

    @service_action
    def renombrar_item(self, ctx, item_id: int, nombre: str) -> Dict[str, Any]:
        item = self._item(ctx, item_id)
        self._exigir_editable(item.cotizacion)
        if not nombre or not str(nombre).strip():
            raise ValidationException("El nombre del item es requerido")
        item.nombre = str(nombre).strip()
        self.commit()
        return item.to_dict()

    @service_action
    def eliminar_item(self, ctx, item_id: int) -> Dict[str, Any]:
        """Elimina el item y sus rubros en cascada."""
        item = self._item(ctx, item_id)
        cotizacion = item.cotizacion
        self._exigir_editable(cotizacion)

        cotizacion.items.remove(item)
        self._recalcular_cotizacion(cotizacion)
        self.commit()
        return self._serializar(cotizacion, incluir_items=True)

    @service_action
    def agregar_item_desde_servicio(self, ctx, cotizacion_id: int, servicio_id: int) -> Dict[str, Any]:
        """
        Crea un item a partir de un servicio del catálogo.

        Copia la plantilla de rubros del servicio; si no tiene plantilla, el
        precio estándar se materializa como un único rubro de servicios
        profesionales (cantidad 1, unidad 'global').
        """
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_editable(cotizacion)
        self._exigir_detallada(cotizacion)
        servicio = self._get_scoped(Servicio, servicio_id, ctx.workspace_id)
        if not servicio.activo:
            raise ValidationException(f"El servicio {servicio.nombre} está inactivo",
                                      details={'servicio_id': servicio.id})

        item = ItemCotizacion(
            nombre=servicio.nombre,
            orden=self._siguiente_orden(cotizacion.items),
            servicio_origen_id=servicio.id,
        )
        plantilla = servicio.rubros_template or []
        if plantilla:
            for datos in plantilla:
                item.rubros.append(self._nuevo_rubro(item, RubroPatch.from_dict(datos, requiere_tipo=True)))
        else:
            item.rubros.append(self._nuevo_rubro(item, RubroPatch(
                tipo=TipoRubro.SERVICIOS_PROF.value,
                descripcion=servicio.nombre,
                cantidad=Decimal('1'),
                unidad='global',
                valor_unitario=QuoteCalculator._to_decimal(servicio.precio_estandar),
            )))
        cotizacion.items.append(item)

        self._recalcular_item(item)
        self._recalcular_cotizacion(cotizacion)
        self.commit()
        self._log_info(f"Item desde servicio {servicio.id} agregado a {cotizacion.consecutivo}")
        return {'item': item.to_dict(), 'cotizacion': self._serializar(cotizacion)}

    # ===== Rubros =====

    @service_action
    def agregar_rubro(self, ctx, item_id: int, datos: Union[RubroPatch, Dict[str, Any]]) -> Dict[str, Any]:
        item = self._item(ctx, item_id)
        self._exigir_editable(item.cotizacion)
        patch = datos if isinstance(datos, RubroPatch) else RubroPatch.from_dict(datos, requiere_tipo=True)
        if patch.tipo is None:
            raise ValidationException("tipo de rubro es requerido", details={'campo': 'tipo'})

        rubro = self._nuevo_rubro(item, patch)
        item.rubros.append(rubro)
        self._recalcular_item(item)
        self._recalcular_cotizacion(item.cotizacion)
        self.commit()
        return {'rubro': rubro.to_dict(), 'item': item.to_dict()}

    @service_action
    def actualizar_rubro(self, ctx, rubro_id: int, datos: Union[RubroPatch, Dict[str, Any]]) -> Dict[str, Any]:
        rubro = self._rubro(ctx, rubro_id)
        item = rubro.item
        self._exigir_editable(item.cotizacion)
        patch = datos if isinstance(datos, RubroPatch) else RubroPatch.from_dict(datos)

        patch.aplicar(rubro)
        self._recalcular_item(item)
        self._recalcular_cotizacion(item.cotizacion)
        self.commit()
        return {'rubro': rubro.to_dict(), 'item': item.to_dict()}

    @service_action
    def eliminar_rubro(self, ctx, rubro_id: int) -> Dict[str, Any]:
        rubro = self._rubro(ctx, rubro_id)
        item = rubro.item
        self._exigir_editable(item.cotizacion)

        item.rubros.remove(rubro)
        self._recalcular_item(item)
        self._recalcular_cotizacion(item.cotizacion)
        self.commit()
        return item.to_dict()

    # ===== Transiciones =====

    @service_action
    def enviar(self, ctx, cotizacion_id: int, hoy: Optional[date] = None) -> Dict[str, Any]:
        """
        Envía un borrador al cliente.

        Sella la fecha de envío y fija la validez a hoy + vigencia configurada.

        Raises:
            ValidationException: Si el valor de venta no es positivo
            ConflictException: Si no está en borrador o la oportunidad ya tiene
                               otra cotización enviada
        """
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_estado(cotizacion, 'enviar')
        if QuoteCalculator._to_decimal(cotizacion.valor_total) <= 0:
            raise ValidationException(
                "La cotización debe tener un valor mayor a cero para enviarse",
                details={'cotizacion_id': cotizacion.id},
            )

        hoy = hoy or date.today()
        vigencia = current_app.config.get('COTIZACION_VIGENCIA_DIAS', DEFAULT_VIGENCIA_DIAS)
        self._transicionar_a_enviada(ctx, cotizacion, 'enviar', {
            'fecha_envio': datetime.utcnow(),
            'fecha_validez': hoy + timedelta(days=vigencia),
        })
        return self._serializar(cotizacion)

    @service_action
    def reabrir(self, ctx, cotizacion_id: int) -> Dict[str, Any]:
        """Vuelve a enviar una cotización rechazada."""
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_estado(cotizacion, 'reabrir')
        self._transicionar_a_enviada(ctx, cotizacion, 'reabrir', {'fecha_envio': datetime.utcnow()})
        return self._serializar(cotizacion)

    @service_action
    def aceptar(self, ctx, cotizacion_id: int) -> ActionResult:
        """
        Marca la cotización enviada como aceptada y dispara el cierre ganado
        de la oportunidad si sigue activa.

        El resultado del cierre viaja en ``data['ganar']``; si la contraparte
        no tiene perfil fiscal completo, el resultado lleva la señal
        ``needs_fiscal`` aunque la aceptación ya quedó confirmada.
        """
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_estado(cotizacion, 'aceptar')
        self._transicionar(ctx, cotizacion, 'aceptar')
        self.commit()
        self._audit(ctx, f"cotizacion {cotizacion.consecutivo} aceptada")

        data = {'cotizacion': self._serializar(cotizacion), 'ganar': None}
        signal = None
        if es_activa(cotizacion.oportunidad.etapa):
            resultado = WinService().ganar(ctx, cotizacion.oportunidad_id)
            data['ganar'] = resultado.to_dict()
            signal = resultado.signal
        return ActionResult(success=True, data=data, signal=signal)

    @service_action
    def rechazar(self, ctx, cotizacion_id: int, motivo: Optional[str] = None) -> Dict[str, Any]:
        cotizacion = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        self._exigir_estado(cotizacion, 'rechazar')
        valores = {}
        if motivo and motivo.strip():
            nota = f"Motivo de rechazo: {motivo.strip()}"
            valores['notas'] = f"{cotizacion.notas}\n{nota}" if cotizacion.notas else nota
        self._transicionar(ctx, cotizacion, 'rechazar', valores)
        self.commit()
        self._audit(ctx, f"cotizacion {cotizacion.consecutivo} rechazada")
        return self._serializar(cotizacion)

    @service_action
    def vencer_cotizaciones(self, ctx, hoy: Optional[date] = None) -> Dict[str, Any]:
        """Pasa a 'vencida' las cotizaciones enviadas cuya fecha de validez ya pasó."""
        hoy = hoy or date.today()
        desde, hacia = ACCIONES_TRANSICION['vencer']
        ahora = datetime.utcnow()

        # Solo se reportan las que el UPDATE condicionado realmente movió
        consecutivos = []
        for cotizacion in self._enviadas_expiradas(ctx, hoy):
            resultado = db.session.execute(
                update(Cotizacion)
                .where(
                    Cotizacion.id == cotizacion.id,
                    Cotizacion.workspace_id == ctx.workspace_id,
                    Cotizacion.estado == desde.value,
                )
                .values(estado=hacia.value, fecha_modificacion=ahora)
            )
            if resultado.rowcount:
                consecutivos.append(cotizacion.consecutivo)
        self.commit()

        if consecutivos:
            self._audit(ctx, f"cotizaciones vencidas: {', '.join(consecutivos)}")
        return {'vencidas': consecutivos}

    def _enviadas_expiradas(self, ctx, hoy: date) -> List[Cotizacion]:
        return (
            Cotizacion.query
            .filter(
                Cotizacion.workspace_id == ctx.workspace_id,
                Cotizacion.estado == EstadoCotizacion.ENVIADA.value,
                Cotizacion.fecha_validez.isnot(None),
                Cotizacion.fecha_validez < hoy,
            )
            .order_by(Cotizacion.id)
            .all()
        )

    # ===== Duplicación =====

    @service_action
    def duplicar(self, ctx, cotizacion_id: int) -> Dict[str, Any]:
        """
        Copia una cotización en cualquier estado como borrador nuevo.

        En modo detallado se copian en profundidad items y rubros; la copia
        tiene un consecutivo nuevo y referencia a la original en duplicada_de.
        """
        original = self.get_by_id_or_fail(cotizacion_id, ctx.workspace_id)
        consecutivo = siguiente_consecutivo(ctx.workspace_id)

        copia = Cotizacion(
            workspace_id=ctx.workspace_id,
            oportunidad_id=original.oportunidad_id,
            consecutivo=consecutivo,
            modo=original.modo,
            estado=EstadoCotizacion.BORRADOR.value,
            descripcion=original.descripcion,
            valor_total=original.valor_total,
            costo_total=original.costo_total,
            margen_porcentaje=original.margen_porcentaje,
            condiciones_pago=original.condiciones_pago,
            duplicada_de=original.id,
        )
        if original.es_detallada:
            for item in original.items:
                nuevo_item = ItemCotizacion(
                    nombre=item.nombre,
                    orden=item.orden,
                    subtotal=item.subtotal,
                    servicio_origen_id=item.servicio_origen_id,
                )
                for rubro in item.rubros:
                    nuevo_item.rubros.append(Rubro(
                        tipo=rubro.tipo,
                        descripcion=rubro.descripcion,
                        cantidad=rubro.cantidad,
                        unidad=rubro.unidad,
                        valor_unitario=rubro.valor_unitario,
                        valor_total=rubro.valor_total,
                        orden=rubro.orden,
                    ))
                copia.items.append(nuevo_item)
                self._recalcular_item(nuevo_item)
        self._recalcular_cotizacion(copia)

        db.session.add(copia)
        self.commit()
        self._log_info(f"Cotización {original.consecutivo} duplicada como {copia.consecutivo}")
        return self._serializar(copia, incluir_items=True)

    # ===== Helpers =====

    def _item(self, ctx, item_id: int) -> ItemCotizacion:
        item = db.session.get(ItemCotizacion, item_id)
        if item is None or item.cotizacion.workspace_id != ctx.workspace_id:
            raise NotFoundException('ItemCotizacion', item_id)
        return item

    def _rubro(self, ctx, rubro_id: int) -> Rubro:
        rubro = db.session.get(Rubro, rubro_id)
        if rubro is None or rubro.item.cotizacion.workspace_id != ctx.workspace_id:
            raise NotFoundException('Rubro', rubro_id)
        return rubro

    @staticmethod
    def _siguiente_orden(elementos) -> int:
        return max((e.orden or 0 for e in elementos), default=0) + 1

    def _nuevo_rubro(self, item: ItemCotizacion, patch: RubroPatch) -> Rubro:
        tipo = TipoRubro(patch.tipo)
        cantidad = patch.cantidad if patch.cantidad is not None else Decimal('1')
        valor_unitario = patch.valor_unitario if patch.valor_unitario is not None else Decimal('0')
        return Rubro(
            tipo=tipo.value,
            descripcion=patch.descripcion,
            cantidad=cantidad,
            unidad=patch.unidad or UNIDAD_POR_DEFECTO[tipo],
            valor_unitario=valor_unitario,
            valor_total=QuoteCalculator.total_rubro(cantidad, valor_unitario),
            orden=self._siguiente_orden(item.rubros),
        )

    @staticmethod
    def _recalcular_item(item: ItemCotizacion) -> None:
        for rubro in item.rubros:
            rubro.valor_total = QuoteCalculator.total_rubro(rubro.cantidad, rubro.valor_unitario)
        item.subtotal = QuoteCalculator.subtotal_item(item.rubros)

    @staticmethod
    def _recalcular_cotizacion(cotizacion: Cotizacion) -> None:
        """Costo y margen derivados de los items; nulos en modo flash."""
        if cotizacion.modo != ModoCotizacion.DETALLADA.value:
            cotizacion.costo_total = None
            cotizacion.margen_porcentaje = None
            return
        costo = QuoteCalculator.costo_total(cotizacion.items)
        cotizacion.costo_total = costo
        cotizacion.margen_porcentaje = QuoteCalculator.margen_porcentaje(cotizacion.valor_total, costo)

    @staticmethod
    def _exigir_editable(cotizacion: Cotizacion) -> None:
        if not es_editable(cotizacion.estado):
            raise ConflictException(
                f"La cotización {cotizacion.consecutivo} está {cotizacion.estado} y no se puede "
                f"modificar. Duplícala para editarla.",
                details={'cotizacion_id': cotizacion.id, 'estado': cotizacion.estado,
                         'consecutivo': cotizacion.consecutivo},
            )

    @staticmethod
    def _exigir_detallada(cotizacion: Cotizacion) -> None:
        if not cotizacion.es_detallada:
            raise ValidationException(
                "Solo las cotizaciones detalladas tienen items y rubros",
                details={'cotizacion_id': cotizacion.id, 'modo': cotizacion.modo},
            )

    @staticmethod
    def _exigir_estado(cotizacion: Cotizacion, accion: str) -> None:
        desde, _ = ACCIONES_TRANSICION[accion]
        if cotizacion.estado != desde.value:
            raise ConflictException(
                f"No se puede {accion} la cotización {cotizacion.consecutivo}: "
                f"está {cotizacion.estado} y se requiere {desde.value}",
                details={'cotizacion_id': cotizacion.id, 'estado': cotizacion.estado,
                         'accion': accion, 'consecutivo': cotizacion.consecutivo},
            )

    def _transicionar(self, ctx, cotizacion: Cotizacion, accion: str,
                      valores: Optional[Dict[str, Any]] = None) -> None:
        """UPDATE condicionado al estado previo; 0 filas afectadas es conflicto."""
        desde, hacia = ACCIONES_TRANSICION[accion]
        resultado = db.session.execute(
            update(Cotizacion)
            .where(
                Cotizacion.id == cotizacion.id,
                Cotizacion.workspace_id == ctx.workspace_id,
                Cotizacion.estado == desde.value,
            )
            .values(estado=hacia.value, fecha_modificacion=datetime.utcnow(), **(valores or {}))
        )
        if resultado.rowcount == 0:
            raise ConflictException(
                f"La cotización {cotizacion.consecutivo} cambió de estado mientras se procesaba",
                details={'cotizacion_id': cotizacion.id, 'accion': accion},
            )

    def _enviada_existente(self, cotizacion: Cotizacion) -> Optional[Cotizacion]:
        return (
            Cotizacion.query
            .filter(
                Cotizacion.oportunidad_id == cotizacion.oportunidad_id,
                Cotizacion.estado == EstadoCotizacion.ENVIADA.value,
                Cotizacion.id != cotizacion.id,
            )
            .first()
        )

    def _conflicto_enviada(self, otra: Optional[Cotizacion]) -> ConflictException:
        if otra is None:
            return ConflictException("La oportunidad ya tiene una cotización enviada")
        return ConflictException(
            f"Ya existe una cotización enviada ({otra.consecutivo}) para esta oportunidad. "
            f"Recházala o acéptala antes de enviar otra.",
            details={'cotizacion_id': otra.id, 'consecutivo': otra.consecutivo},
        )

    def _transicionar_a_enviada(self, ctx, cotizacion: Cotizacion, accion: str,
                                valores: Dict[str, Any]) -> None:
        otra = self._enviada_existente(cotizacion)
        if otra is not None:
            raise self._conflicto_enviada(otra)

        cotizacion_id = cotizacion.id
        try:
            self._transicionar(ctx, cotizacion, accion, valores)
            self.commit()
        except IntegrityError:
            # Otra cotización se envió entre la verificación y el commit
            self.rollback()
            cotizacion = db.session.get(Cotizacion, cotizacion_id)
            raise self._conflicto_enviada(self._enviada_existente(cotizacion))

        self._audit(ctx, f"cotizacion {cotizacion.consecutivo} {accion} → enviada")

    def _serializar(self, cotizacion: Cotizacion, incluir_items: bool = False) -> Dict[str, Any]:
        data = cotizacion.to_dict(incluir_items=incluir_items)
        data['editable'] = es_editable(cotizacion.estado)
        data['acciones'] = acciones_disponibles(cotizacion.estado)
        # Enviada con validez vencida que aún no pasó por vencer_cotizaciones
        data['validez_expirada'] = (
            cotizacion.estado == EstadoCotizacion.ENVIADA.value
            and esta_vencida(cotizacion.fecha_validez)
        )
        return data
