"Setup package."
from setuptools import find_packages, setup

setup(
    name="thermoeos",
    version="0.1.0",
    description="Helmholtz energy equations of state with jax.",
    license="GNU",
    packages=find_packages(include=["thermoeos", "thermoeos.*"]),
    package_data={"thermoeos": ["database/*/*.csv"]},
    python_requires=">=3.9",
    install_requires=[
        "jax",
        "numpy",
        "scipy",
        "polars",
        "absl-py",
        "ml_collections",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["thermoeos=thermoeos.cli:run"]},
    zip_safe=False,
)
