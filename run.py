import os
import logging

from app import create_app

# Create the app instance using the factory
app = create_app()

if __name__ == '__main__':
    # Set up logging
    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))

    # A production server (like Gunicorn) imports `app` directly.
    app.run(host=os.getenv('HOST', '127.0.0.1'), port=int(os.getenv('PORT', 5000)),
            debug=os.getenv('FLASK_DEBUG', '0') == '1')
