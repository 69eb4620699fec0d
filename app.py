import logging
import os

from flask import Flask, redirect, url_for

from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from sumcheck_routes import sumcheck_bp, init_sumcheck_bp

logging.basicConfig(
    level=os.environ.get("SUMCHECK_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

DB_PATH = os.environ.get("SUMCHECK_DB", "db.json")

if DB_PATH == ":memory:":
    DB = TinyDB(storage=MemoryStorage)  # Memory DB
else:
    DB = TinyDB(DB_PATH)                # Storage DB

app = Flask(__name__)
app.secret_key = os.environ.get("SUMCHECK_SECRET_KEY", "key")

sumcheck_db = DB.table("sumcheck")
init_sumcheck_bp(sumcheck_db)
app.register_blueprint(sumcheck_bp)


@app.route("/")
def main():
    return redirect(url_for("sumcheck.protocol_page"))


if __name__ == "__main__":
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
