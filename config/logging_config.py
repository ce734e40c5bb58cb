import logging
import os
from logging.handlers import RotatingFileHandler


def setup_logging(app):
    """Configura logging estructurado para la aplicacion"""

    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
    )

    app.logger.setLevel(logging.INFO)

    # Logger de auditoria de transiciones (cotizaciones y oportunidades)
    audit_logger = logging.getLogger('audit')
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False  # No propagar a root logger

    if not app.config.get('LOG_TO_FILE', True):
        if not audit_logger.handlers:
            audit_logger.addHandler(logging.NullHandler())
        return

    # Crear directorio de logs si no existe
    log_dir = app.config.get('LOG_DIR') or os.path.join(app.root_path, 'logs')
    os.makedirs(log_dir, exist_ok=True)

    # Handler para archivo general de aplicacion
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, 'app.log'),
        maxBytes=10485760,  # 10MB
        backupCount=10
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.INFO)

    # Handler para errores criticos
    error_handler = RotatingFileHandler(
        os.path.join(log_dir, 'errors.log'),
        maxBytes=10485760,
        backupCount=10
    )
    error_handler.setFormatter(formatter)
    error_handler.setLevel(logging.ERROR)

    # Handler para auditoria
    audit_handler = RotatingFileHandler(
        os.path.join(log_dir, 'audit.log'),
        maxBytes=10485760,
        backupCount=20  # Mas retention para auditorias
    )
    audit_handler.setFormatter(formatter)
    audit_handler.setLevel(logging.INFO)

    app.logger.addHandler(file_handler)
    app.logger.addHandler(error_handler)
    audit_logger.addHandler(audit_handler)

    app.logger.info('Sistema de logging configurado correctamente')
    app.logger.info(f'Logs guardados en: {log_dir}')
