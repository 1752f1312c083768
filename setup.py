import setuptools

setuptools.setup(
    name="review_bomber",
    version="0.1.0",
    description="A LAN party game server that runs Review Bomber rounds for phones connected over Socket.IO.",
    packages=setuptools.find_packages(include=["review_bomber", "review_bomber.*"]),
    install_requires=[
        "eventlet",
        "flask",
        "flask-socketio",
        "pandas",
        "flatten_dict",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-timeout>=2.3",
        ],
    },
)
