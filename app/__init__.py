"""Application factory and bootstrap helpers."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

import importlib
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import click
from flask import Flask, jsonify
from flask.cli import AppGroup
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import AppConfig
from config.logging_config import setup_logging
from extensions import db, login_manager, migrate
from models import Usuario, Workspace

_logger = logging.getLogger(__name__)


def _import_blueprint(module_name: str, attr_name: str):
    module = importlib.import_module(module_name)
    return getattr(module, attr_name)


@login_manager.user_loader
def load_user(user_id: str) -> Optional[Usuario]:
    try:
        return db.session.get(Usuario, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def _unauthorized():
    return jsonify({'success': False, 'error': 'No autenticado', 'code': 'UNAUTHENTICATED'}), 401


def _parse_fecha(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise click.BadParameter("Formato esperado: AAAA-MM-DD") from exc


def _register_cotizaciones_cli(app: Flask) -> None:
    cotizaciones_cli = AppGroup("cotizaciones")

    @cotizaciones_cli.command("vencer")
    @click.option("--fecha", default=None, help="Fecha de referencia (AAAA-MM-DD); por defecto hoy")
    def cotizaciones_vencer(fecha: Optional[str]):
        """Marca como vencidas las cotizaciones enviadas con validez expirada."""

        from services import QuoteService, WorkspaceContext

        hoy = _parse_fecha(fecha)
        service = QuoteService()
        total = 0
        with app.app_context():
            for workspace in Workspace.query.filter_by(activo=True).order_by(Workspace.id).all():
                resultado = service.vencer_cotizaciones(WorkspaceContext(workspace_id=workspace.id), hoy=hoy)
                if not resultado.success:
                    click.echo(f"[WARN] Workspace {workspace.id}: {resultado.error}")
                    continue
                vencidas = resultado.data['vencidas']
                total += len(vencidas)
                if vencidas:
                    click.echo(f"[OK] Workspace {workspace.id}: {', '.join(vencidas)}")

        click.echo(f"[OK] Cotizaciones vencidas: {total}")

    app.cli.add_command(cotizaciones_cli)


def _register_fiscal_cli(app: Flask) -> None:
    fiscal_cli = AppGroup("fiscal")

    @fiscal_cli.command("simular")
    @click.argument("valor_bruto", type=click.FLOAT)
    @click.option("--costo", type=click.FLOAT, default=0.0, help="Costo total del proyecto")
    def fiscal_simular(valor_bruto: float, costo: float):
        """Desglose fiscal de un valor con los perfiles por defecto."""

        from services.fiscal import resumen_fiscal

        resumen = resumen_fiscal(Decimal(str(valor_bruto)), Decimal(str(costo)))
        if resumen is None:
            click.echo("[WARN] El valor bruto debe ser mayor a cero.")
            return

        desglose = resumen.desglose
        filas = [
            ("Valor bruto", desglose.valor_bruto),
            ("IVA", desglose.iva),
            ("Total cliente paga", desglose.total_cliente_paga),
            ("ReteFuente", desglose.retefuente),
            ("ReteICA", desglose.reteica),
            ("ReteIVA", desglose.reteiva),
            ("Neto recibido", desglose.neto_recibido),
            ("Seguridad social", resumen.seguridad_social),
            ("Ganancia real", resumen.ganancia_real),
        ]
        for etiqueta, valor in filas:
            click.echo(f"{etiqueta:<20} {int(valor):>15,}")
        click.echo(f"{'Margen real neto':<20} {resumen.margen_real_neto_pct:>14}%")
        for alerta in resumen.alertas:
            click.echo(f"[{alerta['tipo'].upper()}] {alerta['mensaje']}")

    app.cli.add_command(fiscal_cli)


def _register_clis(app: Flask) -> None:
    _register_cotizaciones_cli(app)
    _register_fiscal_cli(app)


def _register_blueprints(app: Flask) -> None:
    for module_name, attr_name in [
        ("blueprint_pipeline", "pipeline_bp"),
        ("blueprint_cotizaciones", "cotizaciones_bp"),
    ]:
        blueprint = _import_blueprint(module_name, attr_name)
        app.register_blueprint(blueprint)


def _register_routes(app: Flask) -> None:
    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})


def create_app(config: Optional[AppConfig] = None, overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    if overrides:
        app.config.update(overrides)

    cfg = config or AppConfig()
    cfg.init_app(app)

    setup_logging(app)

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db, compare_type=True, directory="migrations")

    login_manager.login_view = None

    _register_clis(app)
    _register_blueprints(app)
    _register_routes(app)

    return app


__all__ = ["create_app", "db", "login_manager", "migrate"]
