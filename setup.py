"""
Packaging for the controller service client.

Tests are collected from the *_test.py modules beside the sources:

    pip install -e .[test]
    pytest src
"""

from setuptools import setup

setup(
    name='cnccontroller-client-py',
    version='0.0.1',
    description='Client facade for a CNC controller service: session tracking, event relay and '
                'position reports for Grbl, Smoothie and TinyG.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['cnccontroller', 'cnccontroller.config', 'cnccontroller.support', 'cnccontroller.transport'],
    package_data={'cnccontroller.config': ['*.cfg']},
    python_requires='>=3.8',
    install_requires=[
        'configobj>=5.0.9',
        'python-socketio[client]>=5.11',
    ],
    extras_require={
        'test': ['PyHamcrest>=2.0', 'pytest'],
    },
    zip_safe=False,
)
