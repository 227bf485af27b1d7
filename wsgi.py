# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── uniprice/        <- Paquete Python
#       ├── main.py
#       ├── services/
#       └── repositories/
#
# Con un solo worker el estado en memoria (catálogo, pedidos, config) y las
# suscripciones de Firestore viven en un único proceso:
#   gunicorn wsgi:app --workers 1 --threads 8
# ==============================================================================

from uniprice.main import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
