"""
Packaging for hookloader. Install for development with `pip install -e .[test]` and run the
tests with `pytest src`.
"""

from setuptools import setup


setup(
    name='hookloader',
    version='0.1.0',
    description='Discovers handler modules in directories and binds them to server connection events.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['hookloader', 'hookloader.config', 'hookloader.support'],
    python_requires='>=3.8',
    install_requires=[
        'configobj>=5.0.6,<5.1',    # provides the top-level validate module
    ],
    extras_require={
        'test': ['PyHamcrest>=2.0', 'pytest'],
    },
    zip_safe=False,
)
