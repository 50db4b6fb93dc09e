from setuptools import setup, find_packages

setup(
    name="nowplaying_lcd",
    version="0.1.0",
    packages=find_packages(),
    py_modules=["mqtt_logging"],
    install_requires=[
        "requests>=2.31.0",
        "paho-mqtt>=2.0.0",
        "python-dotenv>=1.0.0",
        "smbus2>=0.4.3",
    ],
    extras_require={
        "pi": ["RPi.GPIO>=0.7.1"],
        "test": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": ["nowplaying-lcd=hardware.app:main"],
    },
    python_requires=">=3.10",
)
