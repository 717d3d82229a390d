from setuptools import setup, find_packages

setup(
    name="tortilla",
    version="0.1.0",
    description="Wrapper over the solc compiler producing JSON contract artifacts",
    packages=find_packages(include=["tortilla", "tortilla.*"]),
    install_requires=[
        "web3>=6.0.0",
        "eth-utils>=2.0.0",
        "pyyaml>=6.0",
        "watchdog>=3.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "eth-account>=0.8.0",
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "tortilla=tortilla.main:main",
        ],
    },
)
