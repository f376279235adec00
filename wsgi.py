# wsgi.py
import logging
import os

from waterbill.main import create_app

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

app = create_app()

# Optionnel : lancer le serveur manuellement en local
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5001")))
