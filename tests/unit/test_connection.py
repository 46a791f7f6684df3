from unittest.mock import MagicMock

import pytest
from sqlalchemy.pool import NullPool
from tablemap.connection import _split_statements, dispose_all_engines
from tablemap.connection import get_engine_for_options
from tablemap.options import DatabaseOptions


@pytest.fixture
def engine_factory():
    """Engine factory that records create_engine arguments"""
    dispose_all_engines()
    yield MagicMock(side_effect=lambda url, **kw: MagicMock(url=url, kwargs=kw))
    dispose_all_engines()


def test_engine_without_pool(engine_factory):
    """Test NullPool is used unless pooling is requested"""
    options = DatabaseOptions(database='app.db', timeout=5)
    engine = get_engine_for_options(options, engine_factory=engine_factory)

    assert engine.url == 'sqlite:///app.db'
    assert engine.kwargs['poolclass'] is NullPool
    assert engine.kwargs['connect_args']['timeout'] == 5


def test_engine_with_pool(engine_factory):
    """Test pool settings are passed through"""
    options = DatabaseOptions(database='app.db', use_pool=True)
    engine = get_engine_for_options(options, use_pool=True, pool_size=3,
                                    pool_recycle=60, pool_timeout=10,
                                    engine_factory=engine_factory)

    assert 'poolclass' not in engine.kwargs
    assert engine.kwargs['pool_size'] == 3
    assert engine.kwargs['pool_recycle'] == 60
    assert engine.kwargs['pool_timeout'] == 10


def test_engine_registry_reuses_engines(engine_factory):
    """Test equal options share one engine"""
    first = get_engine_for_options(DatabaseOptions(database='a.db'), engine_factory=engine_factory)
    second = get_engine_for_options(DatabaseOptions(database='a.db'), engine_factory=engine_factory)
    other = get_engine_for_options(DatabaseOptions(database='b.db'), engine_factory=engine_factory)

    assert first is second
    assert other is not first
    assert engine_factory.call_count == 2


def test_dispose_all_engines(engine_factory):
    engine = get_engine_for_options(DatabaseOptions(database='a.db'), engine_factory=engine_factory)
    dispose_all_engines()
    engine.dispose.assert_called_once()
    get_engine_for_options(DatabaseOptions(database='a.db'), engine_factory=engine_factory)
    assert engine_factory.call_count == 2


def test_split_statements():
    script = """
    CREATE TABLE a (x INTEGER);

    INSERT INTO a VALUES (1);
    ;
    """
    assert _split_statements(script) == ['CREATE TABLE a (x INTEGER)', 'INSERT INTO a VALUES (1)']


if __name__ == '__main__':
    __import__('pytest').main([__file__])
