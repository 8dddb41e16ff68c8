"""
Default Terraform resource type per (provider, service kind), used when a
node does not carry its own declaration type.
"""
from typing import Dict, Optional, Tuple

DECLARATION_TYPES: Dict[Tuple[str, str], str] = {
    ("aws", "ec2"):             "aws_instance",
    ("aws", "lambda"):          "aws_lambda_function",
    ("aws", "s3"):              "aws_s3_bucket",
    ("aws", "rds"):             "aws_db_instance",
    ("aws", "dynamodb"):        "aws_dynamodb_table",
    ("aws", "vpc"):             "aws_vpc",
    ("aws", "alb"):             "aws_lb",
    ("aws", "sqs"):             "aws_sqs_queue",
    ("aws", "sns"):             "aws_sns_topic",
    ("aws", "api_gateway"):     "aws_api_gateway_rest_api",
    ("aws", "cloudwatch"):      "aws_cloudwatch_log_group",
    ("aws", "cognito"):         "aws_cognito_user_pool",
    ("aws", "secrets_manager"): "aws_secretsmanager_secret",
    ("aws", "step_functions"):  "aws_sfn_state_machine",
    ("aws", "fargate"):         "aws_ecs_service",
    ("gcp", "compute"):         "google_compute_instance",
    ("gcp", "storage"):         "google_storage_bucket",
    ("gcp", "sql"):             "google_sql_database_instance",
    ("gcp", "functions"):       "google_cloudfunctions_function",
    ("gcp", "lb"):              "google_compute_backend_service",
    ("azure", "vm"):            "azurerm_linux_virtual_machine",
    ("azure", "blob"):          "azurerm_storage_account",
    ("azure", "sql"):           "azurerm_mssql_database",
    ("azure", "functions"):     "azurerm_linux_function_app",
    ("azure", "lb"):            "azurerm_lb",
    ("azure", "vnet"):          "azurerm_virtual_network",
}


def declaration_type_for(provider: str, kind: str) -> Optional[str]:
    return DECLARATION_TYPES.get((provider, kind))
