from setuptools import find_namespace_packages, setup

setup(
    name="datasweeper",
    version="0.1.0",
    packages=find_namespace_packages(include=["datasweeper", "datasweeper.*"]),
    python_requires=">=3.9",
    install_requires=[
        "boto3",
        "botocore",
        "click",
        "google-api-core",
        "google-cloud-bigquery",
        "google-cloud-storage",
        "pydantic>=2",
        "python-dotenv",
        "rich",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "datasweeper = datasweeper.main:start_cli",
        ],
    },
    author="Joel M",
    author_email="jtmcn.dev@gmail.com",
    description="A scheduled job that deletes raw source files once their rows are migrated to a converted table.",
    license="MIT",
    keywords="athena bigquery s3 gcs partition cleanup",
)
