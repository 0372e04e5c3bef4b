# models/__init__.py
from models.account import Controller, MODELS, Role, Student
from models.certificate import CATEGORIES, Certificate
from models.classroom import DAYS, ClassRoom
