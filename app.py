# Feedback Delivery - development server

from feedback_delivery import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'], host='0.0.0.0', port=5000)
