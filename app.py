"""
Folio Site
==========

Run with:
    python app.py

Visit:
    http://localhost:5000                     - Portfolio
    http://localhost:5000/admin               - Admin editor
    http://localhost:5000/admin/create-admin  - First admin account
"""

from flask import Flask

from folio import Folio
from folio.core.config import Config

app = Flask(__name__)
app.config['SECRET_KEY'] = Config.SECRET_KEY

folio = Folio(app)


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Folio")
    print("=" * 60)
    print(f"Portfolio:       http://localhost:{Config.port}")
    print(f"Admin Editor:    http://localhost:{Config.port}/admin")
    print(f"Create Admin:    http://localhost:{Config.port}/admin/create-admin")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.port, debug=True, threaded=True)
