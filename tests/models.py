import datetime

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models


class Language(models.Model):
    name = models.CharField(max_length=50)

    class Meta:
        app_label = "tests"

    def __str__(self):
        return self.name


class Country(models.Model):
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=2, unique=True)
    languages = models.ManyToManyField(Language, related_name="countries", blank=True)

    class Meta:
        app_label = "tests"
        verbose_name_plural = "countries"

    def __str__(self):
        return self.name

    @property
    def residents(self):
        return list(self.people.order_by("pk"))


class Person(models.Model):
    GENDERS = [("m", "male"), ("f", "female"), ("o", "other")]

    first_name = models.CharField(max_length=254, validators=[MinLengthValidator(2)])
    last_name = models.CharField(max_length=254, validators=[MinLengthValidator(2)])
    gender = models.CharField(max_length=1, choices=GENDERS)
    date_of_birth = models.DateField(null=True, blank=True)
    country = models.ForeignKey(Country, on_delete=models.CASCADE, related_name="people")

    class Meta:
        app_label = "tests"
        verbose_name_plural = "people"

    def clean(self):
        if self.date_of_birth is None or self.date_of_birth >= datetime.date.today():
            raise ValidationError(
                {"date_of_birth": "Date of birth must be in the past."}, code="invalid_date"
            )

    def full_name(self, inversed=False):
        parts = [self.first_name, self.last_name]
        return ", ".join(reversed(parts)) if inversed else " ".join(parts)


class Passport(models.Model):
    person = models.OneToOneField(Person, on_delete=models.CASCADE, related_name="passport")
    number = models.CharField(max_length=20)

    class Meta:
        app_label = "tests"
