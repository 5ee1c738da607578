from setuptools import setup, find_packages
setup(
    name='vismodel',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*', 'docs', 'docs.*']),
    python_requires='>=3.9',
    install_requires=['numpy>=1.20.0', 'scipy>=1.7.0', 'jax>=0.4.34', 'jaxlib>=0.4.34',
                      'astropy>=5.0.0'],
    extras_require={
        'docs': ['sphinx==8.3.0', 'sphinx_copybutton'],
        'test': ['pytest'],
    }
)
