from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Tiddler",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(db_index=True, max_length=512, unique=True)),
                ("revision", models.PositiveIntegerField(default=0)),
                ("meta", models.TextField(blank=True, default="")),
                ("text", models.TextField(blank=True, default="")),
                ("tags", models.JSONField(blank=True, default=list)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="TiddlerHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(db_index=True, max_length=512)),
                ("revision", models.PositiveIntegerField()),
                ("meta", models.TextField(blank=True, default="")),
                ("text", models.TextField(blank=True, default="")),
                ("tags", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.AddConstraint(
            model_name="tiddlerhistory",
            constraint=models.UniqueConstraint(fields=("title", "revision"), name="tiddler_history_title_revision"),
        ),
    ]
