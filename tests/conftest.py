"""
Pytest configuration and fixtures for the commercial core tests.
"""
import os
import tempfile
import pytest

# Set test environment variables before importing app
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['TESTING'] = '1'
os.environ['LOG_TO_FILE'] = '0'

# File-based SQLite so every app context sees the same data
test_db_fd, test_db_path = tempfile.mkstemp(suffix='.db')
os.environ['DATABASE_URL'] = f'sqlite:///{test_db_path}'

from app import create_app
from extensions import db
from models import (
    Workspace,
    Usuario,
    Empresa,
    Contacto,
    Oportunidad,
    PerfilFiscal,
)
from services import WorkspaceContext


@pytest.fixture(scope='session')
def app():
    """Create and configure a Flask app instance for testing."""
    flask_app = create_app(overrides={
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{test_db_path}',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOGIN_DISABLED': False,
        'LOG_TO_FILE': False,
        'SECRET_KEY': 'test-secret-key',
    })

    with flask_app.app_context():
        db.create_all()

    yield flask_app

    with flask_app.app_context():
        db.session.remove()
        db.drop_all()

    # Close and remove test database
    os.close(test_db_fd)
    os.unlink(test_db_path)


@pytest.fixture(autouse=True)
def app_context(app):
    """Fresh application context per test; tables are emptied afterwards."""
    with app.app_context():
        yield
        db.session.rollback()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Create a test client for making requests."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """Create a CLI runner for testing CLI commands."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def workspace(app):
    ws = Workspace(nombre="Consultora Test")
    db.session.add(ws)
    db.session.commit()
    return ws


@pytest.fixture(scope='function')
def otro_workspace(app):
    ws = Workspace(nombre="Otra Consultora")
    db.session.add(ws)
    db.session.commit()
    return ws


@pytest.fixture(scope='function')
def ctx(workspace):
    return WorkspaceContext(workspace_id=workspace.id)


@pytest.fixture(scope='function')
def test_user(workspace):
    user = Usuario(email="test@example.com", nombre="Test User", workspace_id=workspace.id)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def authenticated_client(client, test_user):
    """Create an authenticated test client."""
    with client.session_transaction() as sess:
        sess['_user_id'] = str(test_user.id)
        sess['_fresh'] = True

    return client


@pytest.fixture(scope='function')
def perfil_fiscal(workspace):
    """Vendedor persona natural, régimen ordinario, declarante y responsable de IVA."""
    perfil = PerfilFiscal(
        workspace_id=workspace.id,
        nit='1020304050',
        razon_social='Consultora Test',
        tipo_persona='natural',
        regimen_tributario='ordinario',
        es_declarante='yes',
        responsable_iva='yes',
        autorretenedor='no',
        ciudad_ica='Bogotá',
    )
    db.session.add(perfil)
    db.session.commit()
    return perfil


@pytest.fixture(scope='function')
def empresa_completa(workspace):
    empresa = Empresa(
        workspace_id=workspace.id,
        nombre="Cliente SAS",
        tipo_documento='NIT',
        numero_documento='900123456',
        tipo_persona='juridica',
        regimen_tributario='ordinario',
        gran_contribuyente='no',
        agente_retenedor='yes',
    )
    db.session.add(empresa)
    db.session.commit()
    return empresa


@pytest.fixture(scope='function')
def empresa_incompleta(workspace):
    empresa = Empresa(workspace_id=workspace.id, nombre="Cliente Nuevo SAS")
    db.session.add(empresa)
    db.session.commit()
    return empresa


@pytest.fixture(scope='function')
def contacto(workspace):
    persona = Contacto(workspace_id=workspace.id, nombre="Ana Cliente", email="ana@cliente.co")
    db.session.add(persona)
    db.session.commit()
    return persona


def _oportunidad(workspace, empresa=None, contacto=None, valor=10000000, etapa='negociacion'):
    oportunidad = Oportunidad(
        workspace_id=workspace.id,
        empresa_id=empresa.id if empresa else None,
        contacto_id=contacto.id if contacto else None,
        descripcion="Implementación de tablero de indicadores",
        valor_estimado=valor,
        etapa=etapa,
        probabilidad=80 if etapa == 'negociacion' else 10,
    )
    db.session.add(oportunidad)
    db.session.commit()
    return oportunidad


@pytest.fixture(scope='function')
def oportunidad(workspace, empresa_completa, contacto):
    """Oportunidad en negociación con contraparte fiscalmente completa."""
    return _oportunidad(workspace, empresa=empresa_completa, contacto=contacto)


@pytest.fixture(scope='function')
def oportunidad_incompleta(workspace, empresa_incompleta, contacto):
    """Oportunidad cuya empresa no tiene datos fiscales."""
    return _oportunidad(workspace, empresa=empresa_incompleta, contacto=contacto)


@pytest.fixture(scope='function')
def nueva_oportunidad(workspace):
    """Fábrica de oportunidades adicionales."""
    def _crear(**kwargs):
        return _oportunidad(workspace, **kwargs)
    return _crear


@pytest.fixture(scope='function')
def escritura_concurrente(app):
    """Ejecuta y confirma una sentencia en otra conexión, como otro proceso."""
    def _ejecutar(sentencia):
        with db.engine.begin() as conexion:
            conexion.execute(sentencia)
    return _ejecutar


# Markers for categorizing tests
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (slower)"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
