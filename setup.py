import setuptools

setuptools.setup(
    name="peerqueue",
    version="0.1.0",
    description="A matchmaking queue that pairs anonymous clients for peer-to-peer sessions.",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "eventlet",
        "flask",
        "flask-socketio",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
)
