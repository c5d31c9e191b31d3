# run.py
import logging

from flask.cli import with_appcontext

from pet_market import create_app, db

app = create_app()
logger = logging.getLogger(__name__)


@app.cli.command('init-db')
@with_appcontext
def init_db():
    db.create_all()
    logger.info('Database initialized.')
    print('Database initialized.')


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
