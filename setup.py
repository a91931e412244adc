from setuptools import setup, find_packages

setup(
    name='pyanalyze',
    version='0.1.0',
    py_modules=['pyanalyze', 'analysis'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark',
        'pydantic>=2',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'pyanalyze = pyanalyze:main',
        ],
    },
)
