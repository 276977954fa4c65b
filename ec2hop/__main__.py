from .cli import ec2_ssh

if __name__ == "__main__":
    ec2_ssh()
