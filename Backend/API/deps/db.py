from contextlib import contextmanager
from deps.settings import DB_DSN


@contextmanager
def get_conn():
    # pyodbc necesita unixODBC en el host; se importa solo al abrir conexion
    import pyodbc

    if not DB_DSN:
        raise RuntimeError("DB_DSN no configurado")
    conn = pyodbc.connect(DB_DSN, autocommit=False)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def exec_tsql(conn, sql: str, params: tuple = ()):
    cur = conn.cursor()
    cur.execute(sql, params)
    # description es None cuando la sentencia no devuelve filas
    if cur.description is None:
        return []
    return cur.fetchall()
