from setuptools import setup, find_packages

setup(
    name="floating_bond_engine",
    version="0.1.0",
    description="Floating-rate bond pricing, yield and round-trip transaction engine",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
        ],
    },
    python_requires=">=3.8",
)
