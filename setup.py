from setuptools import find_namespace_packages, setup

setup(
    name="filerelay",
    version="0.1.0",
    description="filerelay guarda en un canal de Telegram los archivos que recibe y entrega enlaces para recuperarlos.",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    author="Leo",
    python_requires=">=3.10",
    install_requires=[
        "pyrogram",
        "TgCrypto",
        "peewee",
        "pydantic>=2.0",
        "pydantic-settings",
        "typer",
        "rich",
        "fastapi",
        "uvicorn",
    ],
    extras_require={
        "test": ["pytest", "httpx"],
    },
    packages=find_namespace_packages(include=["filerelay", "filerelay.*"]),
    package_data={"filerelay.web.static": ["*.html"]},
    include_package_data=True,
    entry_points={
        "console_scripts": ["filerelay=filerelay.cli:run_script"],
    },
)
