import os

from setuptools import find_packages, setup

with open(os.path.join(os.path.dirname(__file__), 'README.md')) as readme:
    README = readme.read()

# allow setup.py to be run from any path
os.chdir(os.path.normpath(os.path.join(os.path.abspath(__file__), os.pardir)))

setup(
    name='django-budget-ingest',
    version='0.1',
    packages=find_packages(),
    include_package_data=True,
    license='CC0-1.0',
    description='Django app to import capital project sheets and derive project budgets',
    long_description=README,
    long_description_content_type='text/markdown',
    classifiers=[
        'Environment :: Web Environment',
        'Framework :: Django',
        'Framework :: Django :: 4.2',
        'Intended Audience :: Developers',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Internet :: WWW/HTTP :: Dynamic Content',
        'License :: CC0 1.0 Universal (CC0 1.0) Public Domain Dedication'
    ],
    python_requires='>=3.8',
    install_requires=[
        'django>=4.2',
        'djangorestframework',
        'dj-database-url',
        'json_logic_qubit',
        'jsonschema',
        'psycopg2-binary',
        'pyyaml',
        'requests',
        'tabulator',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-django',
        ],
    },
)
