from pathlib import Path

from setuptools import setup

install_requires = [
    "trio>=0.23.0",
]


setup(
    name='presence-ipc',
    version='0.1.0',
    packages=['presence_ipc'],
    license='LGPLv3',
    description='An async library for Discord Rich Presence over local IPC',
    long_description=Path(__file__).with_name("README.rst").read_text(encoding="utf-8"),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3 :: Only",
        "Framework :: Trio",
        "Development Status :: 4 - Beta"
    ],
    install_requires=install_requires,
    extras_require={
        "test": [
            "pytest",
            "pytest-trio",
            "hypothesis",
        ],
        "docs": [
            "sphinx_py3doc_enhanced_theme",
            "sphinx",
            "sphinx-autodoc-typehints",
        ]
    },
)
