"""
Fixed templates for the Terraform project scaffold.

Placeholders use str.format; literal braces in HCL are doubled.
"""

PROVIDERS_TF = """terraform {{
  required_version = ">= 1.5.0"

  required_providers {{
    azurerm = {{
      source  = "hashicorp/azurerm"
      version = "{azurerm_version}"
    }}
    databricks = {{
      source  = "databricks/databricks"
      version = "{databricks_provider_version}"
    }}
  }}
}}

provider "azurerm" {{
  features {{}}
}}

provider "databricks" {{
  host = var.databricks_host
}}
"""

VARIABLES_TF = """variable "project_name" {{
  description = "Prefix applied to every resource name"
  type        = string
  default     = "{project_name}"
}}

variable "location" {{
  description = "Azure region"
  type        = string
  default     = "westeurope"
}}

variable "databricks_host" {{
  description = "Databricks workspace URL"
  type        = string
  default     = null
}}

variable "tags" {{
  description = "Tags applied to every resource"
  type        = map(string)
  default     = {{}}
}}
"""

MAIN_TF = """resource "azurerm_resource_group" "main" {{
  name     = "rg-${{var.project_name}}"
  location = var.location
  tags     = var.tags
}}
"""

OUTPUTS_TF = """output "resource_group_name" {{
  value = azurerm_resource_group.main.name
}}
"""

TFVARS_EXAMPLE = """project_name    = "{project_name}"
location        = "westeurope"
databricks_host = "https://adb-0000000000000000.0.azuredatabricks.net"
"""

GITIGNORE = """.terraform/
*.tfstate
*.tfstate.*
crash.log
*.tfvars
!*.tfvars.example
.terraform.lock.hcl
"""

# file name -> template, written in this order
PROJECT_FILES = {
    "providers.tf": PROVIDERS_TF,
    "variables.tf": VARIABLES_TF,
    "main.tf": MAIN_TF,
    "outputs.tf": OUTPUTS_TF,
    "terraform.tfvars.example": TFVARS_EXAMPLE,
    ".gitignore": GITIGNORE,
}
