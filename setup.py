from setuptools import find_packages, setup

setup(
    name="testrun-stream",
    version="0.1.0",
    packages=find_packages(include=["testrun_stream", "testrun_stream.*"]),
    python_requires=">=3.10",
    install_requires=["boto3>=1.26.0", "botocore>=1.29.0"],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-mock",
            "pytest-cov",
            "moto[dynamodb,events,sqs]",
        ]
    },
)
