"""Spark session initialisation used by the loader entry points."""

from delta import configure_spark_with_delta_pip
from pyspark.sql import SparkSession

from seat_usage.constants import DEFAULT_APP_NAME


def get_spark(app_name: str = DEFAULT_APP_NAME) -> SparkSession:
    """
    Return the active SparkSession, creating one named `app_name` if needed.

    Outside Databricks the new session gets the Delta Lake extensions, which
    `CREATE TABLE ... USING DELTA` and `MERGE INTO` need.
    """
    builder = (
        SparkSession.builder.appName(app_name)
        .config("spark.sql.extensions", "io.delta.sql.DeltaSparkSessionExtension")
        .config(
            "spark.sql.catalog.spark_catalog",
            "org.apache.spark.sql.delta.catalog.DeltaCatalog",
        )
    )
    return configure_spark_with_delta_pip(builder).getOrCreate()
