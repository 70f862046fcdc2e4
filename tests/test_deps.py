from robotops.deps import get_db


def test_get_db_yields_a_session_and_closes_it(database):
    dependency = get_db(database)
    db = next(dependency)

    assert db.get_bind() is database.engine
    dependency.close()

    assert not db.in_transaction()
